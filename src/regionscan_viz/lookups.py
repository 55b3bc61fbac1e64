"""Gene annotation and recombination-rate lookups against public REST APIs."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from regionscan_viz.config import GENE_LOOKUP_MAX_SPAN_BP, Assembly

logger = logging.getLogger(__name__)

UCSC_TRACK_URL = "https://api.genome.ucsc.edu/getData/track"
RECOMBINATION_TRACK = "recomb1000GAvg"
DEFAULT_TIMEOUT = 10.0
JSON_HEADERS = {"Accept": "application/json"}


def _client(client: httpx.Client | None) -> httpx.Client:
    return client or httpx.Client(timeout=DEFAULT_TIMEOUT, headers=JSON_HEADERS)


def gene_lookup_url(chromosome: int, start: int, end: int, assembly: Assembly | str) -> str:
    host = Assembly(assembly).ensembl_host
    return f"https://{host}/overlap/region/human/{chromosome}:{start}-{end}"


def fetch_genes(
    chromosome: int,
    start: int,
    end: int,
    assembly: Assembly | str = Assembly.GRCH38,
    *,
    client: httpx.Client | None = None,
) -> list[dict[str, Any]] | None:
    """Genes overlapping ``chromosome:start-end`` from Ensembl.

    Raises ``ValueError`` for spans over the Ensembl limit before any request
    is made. Network or payload problems are logged and give ``None``.
    """

    if end - start > GENE_LOOKUP_MAX_SPAN_BP:
        raise ValueError(
            f"Region cannot be larger than {GENE_LOOKUP_MAX_SPAN_BP:,} bp (got {end - start:,})"
        )

    url = gene_lookup_url(chromosome, start, end, assembly)
    http = _client(client)
    try:
        response = http.get(url, params={"feature": "gene"}, headers=JSON_HEADERS)
        response.raise_for_status()
        payload = response.json()
    except httpx.HTTPError:
        logger.exception("Gene lookup failed for %s", url)
        return None
    except ValueError:
        logger.warning("Gene lookup returned invalid JSON for %s", url)
        return None
    finally:
        if client is None:
            http.close()

    if not isinstance(payload, list):
        logger.warning("Unexpected gene lookup payload for %s: %r", url, type(payload).__name__)
        return None
    logger.info("Fetched %d genes for chr%s:%s-%s", len(payload), chromosome, start, end)
    return payload


def fetch_recombination(
    chromosome: int,
    start: int,
    end: int,
    assembly: Assembly | str = Assembly.GRCH38,
    *,
    client: httpx.Client | None = None,
) -> list[dict[str, Any]] | None:
    """Recombination-rate track items for a window from the UCSC API."""

    params = {
        "genome": Assembly(assembly).ucsc_genome,
        "track": RECOMBINATION_TRACK,
        "chrom": f"chr{chromosome}",
        "start": start,
        "end": end,
    }
    http = _client(client)
    try:
        response = http.get(UCSC_TRACK_URL, params=params, headers=JSON_HEADERS)
        response.raise_for_status()
        items = response.json()[RECOMBINATION_TRACK][f"chr{chromosome}"]
    except httpx.HTTPError:
        logger.exception("Recombination lookup failed for chr%s:%s-%s", chromosome, start, end)
        return None
    except (ValueError, KeyError, TypeError):
        logger.warning("Recombination lookup returned an unexpected payload for chr%s", chromosome)
        return None
    finally:
        if client is None:
            http.close()

    logger.info("Fetched %d recombination items for chr%s:%s-%s", len(items), chromosome, start, end)
    return items
