# esdump/clients/elasticsearch/client.py
from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

import elasticsearch
from elastic_transport import TransportError
from elasticsearch import ApiError, Elasticsearch, NotFoundError

from esdump.core.config import ClientConfig
from esdump.core.cursor_base import CursorClient, Page, QueryDescriptor
from esdump.core.errors import ClusterError, ProtocolError

logger = logging.getLogger(__name__)


def _sort_clause(sort: Iterable[str]) -> List[Any]:
    """`field:order` strings into body sort entries; bare names pass through."""
    clause: List[Any] = []
    for item in sort:
        name, sep, order = item.partition(":")
        clause.append({name: order} if sep and order else name)
    return clause


def cluster_error(err: ApiError) -> ClusterError:
    """Decode the error type/reason the cluster put in the response body."""
    status = getattr(err.meta, "status", None)
    body = err.body
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        detail = body["error"]
        return ClusterError(
            str(detail.get("reason", err.message)),
            error_type=str(detail.get("type", "unknown")),
            status=status,
        )
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return ClusterError(body["error"], status=status)
    return ClusterError(str(err.message), status=status)


def parse_page(body: Any) -> Page:
    """
    Decode a search/scroll response into a Page.
    hits.total is an int on 6.x clusters and {"value": n, ...} from 7.x on.
    """
    if not isinstance(body, dict):
        raise ProtocolError(f"expected a JSON object, got {type(body).__name__}")
    hits = body.get("hits")
    if not isinstance(hits, dict) or not isinstance(hits.get("hits"), list):
        raise ProtocolError("response has no hits.hits array")

    total = hits.get("total")
    if isinstance(total, dict):
        total = total.get("value")
    if total is not None and not isinstance(total, int):
        raise ProtocolError(f"hits.total is not a number: {total!r}")

    records = []
    for hit in hits["hits"]:
        if not isinstance(hit, dict):
            raise ProtocolError("hit is not a JSON object")
        records.append(hit.get("_source"))

    cursor = body.get("_scroll_id")
    if cursor is not None and not isinstance(cursor, str):
        raise ProtocolError("_scroll_id is not a string")
    return Page(records=records, total=total, cursor=cursor)


class ElasticsearchCursorClient(CursorClient):
    """
    Cursor client over the Elasticsearch scroll API.
    Talks to the cluster directly (search -> scroll -> clear_scroll) instead of
    helpers.scan, so the driver sees every page and every scroll id.
    Built on elasticsearch-py 8, which talks to 7.14+ and 8.x servers only.
    Document types and integer hit totals are 6.x features,
    so doc_type is never sent and parse_page keeps the int branch only for
    bodies fed to it directly.
    """

    def __init__(self, cfg: ClientConfig, es: Optional[Elasticsearch] = None) -> None:
        self.cfg = cfg
        self.client: Elasticsearch | None = es
        self._owns_client = es is None

    def open(self) -> None:
        """Create the client and log the versions on both ends."""
        if self.client is None:
            self.client = Elasticsearch(
                self.cfg.hosts,
                basic_auth=self.cfg.basic_auth,
                request_timeout=self.cfg.request_timeout,
                max_retries=self.cfg.max_retries,
                retry_on_timeout=self.cfg.retry_on_timeout,
                verify_certs=self.cfg.verify_certs,
            )
        try:
            info = self._call(self.client.info)
            try:
                server = info["version"]["number"]
            except (KeyError, TypeError) as e:
                raise ProtocolError("cluster info has no version.number") from e
        except Exception:
            self.close()
            raise
        logger.info("Client: %s, Server: %s", elasticsearch.__versionstr__, server)

    def close(self) -> None:
        if self.client is not None and self._owns_client:
            self.client.close()
            self.client = None

    # ---------------------- cluster checks ----------------------

    def check_indices(self, indices: Iterable[str]) -> None:
        """Fail unless every target index exists; `_all` always passes."""
        names = list(indices)
        if not names:
            raise ClusterError("no index given", error_type="index_not_found_exception")
        if "_all" in names:
            return
        exists = self._call(self._es.indices.exists, index=names)
        if not exists:
            raise ClusterError(
                f"any of index(es) {{{','.join(names)}}} does not exist in "
                f"{{{','.join(self.cfg.hosts)}}}",
                error_type="index_not_found_exception",
                status=404,
            )

    # ---------------------- cursor protocol ----------------------

    def initial_fetch(self, descriptor: QueryDescriptor) -> Page:
        self.check_indices(descriptor.indices)
        if descriptor.doc_type not in (None, "", "_doc"):
            logger.warning(
                "Document type %r ignored: mapping types were removed in Elasticsearch 7",
                descriptor.doc_type,
            )

        body: Dict[str, Any] = dict(descriptor.body or {})
        body["size"] = descriptor.size
        if descriptor.sort:
            body["sort"] = _sort_clause(descriptor.sort)
        if descriptor.max_results > 0:
            # applied per shard by the cluster, so it can overshoot the cap
            body["terminate_after"] = descriptor.max_results

        params: Dict[str, Any] = {
            "index": ",".join(descriptor.indices),
            "scroll": descriptor.scroll,
            "body": body,
        }
        if descriptor.query_string:
            params["q"] = descriptor.query_string
        if list(descriptor.fields) != ["*"]:
            params["source_includes"] = list(descriptor.fields)

        resp = self._call(self._es.search, **params)
        return parse_page(getattr(resp, "body", resp))

    def continuation_fetch(self, token: str, ttl: str) -> Page:
        resp = self._call(self._es.scroll, scroll_id=token, scroll=ttl)
        return parse_page(getattr(resp, "body", resp))

    def release_cursors(self, tokens: Iterable[str]) -> None:
        ids = list(tokens)
        if not ids:
            return
        try:
            self._es.clear_scroll(scroll_id=ids)
        except NotFoundError:
            logger.debug("Scroll cursor(s) already released")

    # ---------------------- internals ----------------------

    @property
    def _es(self) -> Elasticsearch:
        assert self.client, "Client not opened. Call .open() first."
        return self.client

    def _call(self, fn: Any, **kwargs: Any) -> Any:
        try:
            return fn(**kwargs)
        except ApiError as e:
            raise cluster_error(e) from e
        except TransportError as e:
            raise ClusterError(str(e), error_type="transport_error") from e


__all__ = ["ElasticsearchCursorClient", "cluster_error", "parse_page"]
