# esdump/cli.py
from __future__ import annotations

import logging
import signal
import threading

import click

from esdump.clients.elasticsearch import ElasticsearchCursorClient
from esdump.core.config import DEFAULT_OUTPUT, DEFAULT_SCROLL, ClientConfig, ExportConfig, SinkConfig
from esdump.core.errors import ExportError
from esdump.core.export_driver import ExportDriver
from esdump.core.query import build_descriptor, parse_auth, parse_fields, parse_indices
from esdump.logging_setup import setup_logging
from esdump.sinks import make_sink

logger = logging.getLogger("esdump")


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("-q", "--query", "q", default="", help="Query string in Lucene syntax.")
@click.option("-r", "--raw-query", is_flag=True, help="Treat the query as query DSL (JSON).")
@click.option(
    "-u", "--url", default="http://localhost:9200", envvar="ESDUMP_URL", show_default=True,
    help="Elasticsearch host URL(s), comma separated.",
)
@click.option("-a", "--auth", default="", envvar="ESDUMP_AUTH", help="Basic auth as username:password.")
@click.option("-i", "--index", default="", help="Index name(s), comma separated. Default is _all.")
@click.option("-d", "--doc-type", default="_doc", show_default=True, help="Document type.")
@click.option("-f", "--fields", default="", help="Fields to keep in output, comma separated.")
@click.option("-p", "--print", "to_stdout", is_flag=True, help="Print records to stdout.")
@click.option("-o", "--output", default=DEFAULT_OUTPUT, show_default=True, help="File to append records to.")
@click.option("-m", "--max-results", type=click.IntRange(min=0), default=0, help="Maximum records to export, 0 for no limit.")
@click.option("-s", "--size", type=click.IntRange(min=1), default=1000, show_default=True, help="Records per scroll page.")
@click.option("--sort", default="", help="Sort spec, e.g. 'timestamp:asc,_doc'.")
@click.option("--scroll", default=DEFAULT_SCROLL, show_default=True, help="Scroll cursor keep-alive.")
@click.option("--timeout", type=float, default=60.0, show_default=True, help="Request timeout in seconds.")
@click.option("--strict", is_flag=True, help="Fail on records that cannot be serialized instead of skipping them.")
@click.option("--log-level", default="INFO", envvar="ESDUMP_LOG_LEVEL", show_default=True)
def main(q, raw_query, url, auth, index, doc_type, fields, to_stdout, output, max_results, size, sort, scroll, timeout, strict, log_level):
    """Export every document matching a query as newline-delimited JSON."""
    try:
        setup_logging(log_level)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--log-level")

    username, password = parse_auth(auth)
    cfg = ExportConfig(
        strict_serialization=strict,
        client=ClientConfig(
            hosts=[h for h in url.split(",") if h],
            username=username,
            password=password,
            request_timeout=timeout,
        ),
        sink=SinkConfig(path=output, to_stdout=to_stdout),
    )

    cancel = threading.Event()

    def _on_sigint(signum, frame):
        logger.warning("Interrupt received, stopping after the current page")
        cancel.set()

    try:
        descriptor = build_descriptor(
            q=q,
            raw_query=raw_query,
            indices=parse_indices(index),
            doc_type=doc_type,
            fields=parse_fields(fields),
            sort=[s for s in sort.split(",") if s],
            size=size,
            max_results=max_results,
            scroll=scroll,
        )
        driver = ExportDriver(cfg, ElasticsearchCursorClient(cfg.client), make_sink(cfg.sink))

        previous = signal.signal(signal.SIGINT, _on_sigint)
        try:
            summary = driver.run(descriptor, cancel=cancel)
        finally:
            signal.signal(signal.SIGINT, previous)
    except ExportError as e:
        logger.error("Export failed: %s", e)
        raise click.ClickException(str(e))

    logger.info("All done")
    logger.info("queryResult: %d", summary.total_matched)
    logger.info("numResult: %d", summary.emitted_count)
    if summary.dropped_count:
        logger.info("dropped: %d", summary.dropped_count)


if __name__ == "__main__":
    main()
