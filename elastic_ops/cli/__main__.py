from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, AppConfig, ConfigError, load_config, resolve_dsn
from ..db.gateway import Gateway, GatewayError, MemoryGateway
from ..db.postgres import PostgresGateway
from ..ingest.parser import ParseError, parse_file
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import get_logger, log_summary, setup_logging
from ..models.catalog import ShrinkageReport
from ..models.loading_paper import ColumnVisibility, LoadingPaperDocument
from ..render.loading_paper import render_loading_paper, to_html
from ..render.printing import LANDSCAPE, PORTRAIT, print_document
from ..render.shrinkage_report import render_shrinkage_report
from ..services.edit_session import EditSession, NoDocumentError
from ..services.loading_paper_store import (
    delete_loading_paper,
    list_loading_papers,
    load_loading_paper,
    save_loading_paper,
)
from ..services.normalizer import normalize
from ..services.orchestrator import ProcessingError, import_directory
from ..services.products import add_product, delete_product, list_products, update_product
from ..services.shrinkage_reports import (
    REQUIREMENT_PRESETS,
    ReportForm,
    create_report,
    delete_report,
    get_report,
    list_reports,
)
from ..services.summary import render_summary_line
from ..services.validation import ValidationError

"""CLI entrypoint (``elastic-ops`` / ``python -m elastic_ops.cli``).

Sub-command groups:
- loading-paper: render / import-dir / list / show / delete
- product: list / add / update / delete
- report: create / list / show / delete

Exit codes: 0 success, 1 fatal (config, parse, validation, store), 2 when a
batch import had failed files.
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


@contextmanager
def _open_gateway(cfg: AppConfig, *, writes: bool = False) -> Iterator[tuple[Gateway, str]]:
    """Yield ``(gateway, mode)``; mode is ``live`` (PostgreSQL) or ``mock`` (in-memory).

    DISABLE_DB_CONNECT=1 forces mock mode. A failed connection falls back to
    mock mode (INFO line) only for read-only commands; for commands that write,
    the GatewayError propagates so nothing is reported as stored.
    """
    logger = get_logger()
    if os.getenv("DISABLE_DB_CONNECT") == "1":
        logger.debug("DB connect disabled via DISABLE_DB_CONNECT=1 -> mock mode")
        yield MemoryGateway(), "mock"
        return
    try:
        gateway = PostgresGateway.connect(resolve_dsn(cfg.database))
    except GatewayError as e:
        if writes:
            raise
        logger.info(f"DB connection failed -> fallback to mock mode: {e}")
        yield MemoryGateway(), "mock"
        return
    try:
        yield gateway, "live"
    finally:
        gateway.close()


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env using python-dotenv.

    override=True: .env の値で既存の環境変数を上書きする (DB 接続情報を最優先)。
    """
    if not path.exists():
        return
    try:
        load_dotenv(dotenv_path=path, override=override)
    except (OSError, UnicodeDecodeError) as e:  # pragma: no cover
        get_logger().warning(f"failed to load .env via python-dotenv: {e}")


def _assignment(text: str) -> tuple[int, str]:
    """``SR=TEXT`` -> (sr, text)."""
    sr, sep, value = text.partition("=")
    if not sep:
        raise argparse.ArgumentTypeError(f"expected SR=TEXT, got {text!r}")
    try:
        return int(sr), value
    except ValueError:
        raise argparse.ArgumentTypeError(f"SR must be an integer, got {sr!r}") from None


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="elastic-ops", description="Elastic products lab reports, catalog and loading papers")
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="YAML config (default: %(default)s)")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    groups = p.add_subparsers(dest="command", required=True)

    # loading-paper
    lp = groups.add_parser("loading-paper", help="Loading paper manifests").add_subparsers(dest="action", required=True)
    render = lp.add_parser("render", help="Render a manifest JSON file to a printable page")
    render.add_argument("file", type=Path)
    render.add_argument("--note", help="Additional note printed in the header")
    render.add_argument("--name", type=_assignment, action="append", default=[], metavar="SR=TEXT",
                        help="Override the printed item name of line SR")
    render.add_argument("--remark", type=_assignment, action="append", default=[], metavar="SR=TEXT",
                        help="Per-line remark")
    render.add_argument("--delete-sr", type=int, action="append", default=[], metavar="N",
                        help="Drop line N (numbers refer to the freshly loaded paper)")
    render.add_argument("--hide", action="append", default=[], metavar="COLUMN",
                        help=f"Hide a column: {', '.join(ColumnVisibility.column_names())}")
    render.add_argument("--out", type=Path, help="Output HTML path")
    render.add_argument("--open", action="store_true", help="Open the page in the browser for printing")
    render.add_argument("--save", action="store_true", help="Also store the edited paper")
    render.set_defaults(handler=_cmd_lp_render)

    imp = lp.add_parser("import-dir", help="Store every *.json manifest in a directory")
    imp.add_argument("directory", type=Path)
    imp.set_defaults(handler=_cmd_lp_import_dir, needs_gateway=True, writes=True)

    lp.add_parser("list", help="List stored loading papers").set_defaults(handler=_cmd_lp_list, needs_gateway=True)

    show = lp.add_parser("show", help="Render a stored loading paper")
    show.add_argument("id")
    show.add_argument("--out", type=Path)
    show.add_argument("--open", action="store_true")
    show.set_defaults(handler=_cmd_lp_show, needs_gateway=True)

    delete = lp.add_parser("delete", help="Delete a stored loading paper")
    delete.add_argument("id")
    delete.set_defaults(handler=_cmd_lp_delete, needs_gateway=True, writes=True)

    # product
    prod = groups.add_parser("product", help="Product catalog").add_subparsers(dest="action", required=True)
    prod.add_parser("list").set_defaults(handler=_cmd_product_list, needs_gateway=True)
    for name, handler in (("add", _cmd_product_add), ("update", _cmd_product_update)):
        sp = prod.add_parser(name)
        if name == "update":
            sp.add_argument("id")
        sp.add_argument("--code", dest="product_code")
        sp.add_argument("--description")
        sp.add_argument("--width", help="e.g. 20MM")
        sp.add_argument("--color")
        sp.set_defaults(handler=handler, needs_gateway=True, writes=True)
    pdel = prod.add_parser("delete")
    pdel.add_argument("id")
    pdel.set_defaults(handler=_cmd_product_delete, needs_gateway=True, writes=True)

    # report
    rep = groups.add_parser("report", help="Shrinkage test reports").add_subparsers(dest="action", required=True)
    create = rep.add_parser("create", help="Create a report and render its certificate")
    create.add_argument("--product", dest="product_code", required=True, help="Product code")
    create.add_argument("--po", dest="po_number", required=True, help="PO number")
    create.add_argument("--date")
    create.add_argument("--item-number")
    create.add_argument("--requirement", choices=[*REQUIREMENT_PRESETS, "OTHER"])
    create.add_argument("--custom-requirement", help="Requirement text when --requirement OTHER")
    create.add_argument("--temp")
    create.add_argument("--dimensional-change")
    create.add_argument("--ph")
    create.add_argument("--result", choices=["Pass", "Fail"])
    create.add_argument("--out", type=Path)
    create.add_argument("--open", action="store_true")
    create.set_defaults(handler=_cmd_report_create, needs_gateway=True, writes=True)

    rep.add_parser("list").set_defaults(handler=_cmd_report_list, needs_gateway=True)
    rshow = rep.add_parser("show")
    rshow.add_argument("id")
    rshow.add_argument("--out", type=Path)
    rshow.add_argument("--open", action="store_true")
    rshow.set_defaults(handler=_cmd_report_show, needs_gateway=True)
    rdel = rep.add_parser("delete")
    rdel.add_argument("id")
    rdel.set_defaults(handler=_cmd_report_delete, needs_gateway=True, writes=True)
    return p


def _parse_args(argv: list[str]) -> argparse.Namespace:
    return _build_parser().parse_args(argv)


# ---- loading-paper ----------------------------------------------------------

def _apply_edits(document: LoadingPaperDocument, args: argparse.Namespace) -> LoadingPaperDocument:
    session = EditSession(document)
    if args.note is not None:
        session.set_header_note(args.note)
    for sr, value in args.name:
        session.set_item_display_name(sr, value)
    for sr, value in args.remark:
        session.set_item_remark(sr, value)
    # 大きい番号から消せば残りの番号は元のまま
    for sr in sorted(set(args.delete_sr), reverse=True):
        session.delete_item(sr)
    return session.document


def _write_loading_paper(document: LoadingPaperDocument, cfg: AppConfig, out: Path, *,
                         visibility: ColumnVisibility | None = None, open_browser: bool = False) -> Path:
    table = render_loading_paper(document, visibility)
    page = to_html(table, cfg.company)
    return print_document(page, out, LANDSCAPE, size=cfg.page_size, open_browser=open_browser)


def _cmd_lp_render(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway | None) -> int:
    logger = get_logger()
    try:
        visibility = ColumnVisibility.hiding(args.hide)
    except ValueError as e:
        raise ValidationError(str(e), ["hide"]) from e

    parsed = parse_file(args.file)
    document = _apply_edits(normalize(parsed.rows), args)
    out = args.out or Path(cfg.output_directory) / f"{args.file.stem}.html"
    path = _write_loading_paper(document, cfg, out, visibility=visibility, open_browser=args.open)
    logger.info(f"rendered {path} items={len(document.items)} weight={document.totals.weight}")

    if args.save and gateway is not None:
        paper_id = save_loading_paper(gateway, document)
        logger.info(f"saved loading paper id={paper_id}")
    return EXIT_SUCCESS_ALL


def _cmd_lp_import_dir(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    logger = get_logger()
    logger.info(f"Processing files from: {args.directory}")
    result = import_directory(args.directory, gateway)
    logger.info(f"total_items={result.total_saved_items}")
    # log_summary が "SUMMARY " を付けるので先頭を落とす
    log_summary(render_summary_line(result)[len("SUMMARY "):])
    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL


def _cmd_lp_list(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    papers = list_loading_papers(gateway)
    for paper in papers:
        print(f"{paper.id}\t{paper.dc_no}\t{paper.po_no}\t{paper.date}\t{paper.acc_name}\t{paper.created_at or ''}")
    get_logger().info(f"loading papers: {len(papers)}")
    return EXIT_SUCCESS_ALL


def _cmd_lp_show(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    document = load_loading_paper(gateway, args.id)
    out = args.out or Path(cfg.output_directory) / f"loading-paper-{args.id}.html"
    path = _write_loading_paper(document, cfg, out, open_browser=args.open)
    get_logger().info(f"rendered {path} items={len(document.items)}")
    return EXIT_SUCCESS_ALL


def _cmd_lp_delete(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    delete_loading_paper(gateway, args.id)
    get_logger().info(f"deleted loading paper id={args.id}")
    return EXIT_SUCCESS_ALL


# ---- product ----------------------------------------------------------------

def _product_form(args: argparse.Namespace) -> dict[str, str | None]:
    return {
        "product_code": args.product_code,
        "description": args.description,
        "width": args.width,
        "color": args.color,
    }


def _cmd_product_list(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    products = list_products(gateway)
    for prod in products:
        print(f"{prod.id}\t{prod.product_code}\t{prod.description}\t{prod.width}\t{prod.color}")
    get_logger().info(f"products: {len(products)}")
    return EXIT_SUCCESS_ALL


def _cmd_product_add(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    product = add_product(gateway, _product_form(args))
    get_logger().info(f"added product id={product.id} {product.label}")
    return EXIT_SUCCESS_ALL


def _cmd_product_update(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    product = update_product(gateway, args.id, _product_form(args))
    get_logger().info(f"updated product id={product.id} {product.label}")
    return EXIT_SUCCESS_ALL


def _cmd_product_delete(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    delete_product(gateway, args.id)
    get_logger().info(f"deleted product id={args.id}")
    return EXIT_SUCCESS_ALL


# ---- report -----------------------------------------------------------------

def _report_form(args: argparse.Namespace) -> ReportForm:
    given = {
        "product_code": args.product_code,
        "po_number": args.po_number,
        "date": args.date,
        "item_number": args.item_number,
        "requirement": args.requirement,
        "custom_requirement": args.custom_requirement,
        "temp": args.temp,
        "dimensional_change": args.dimensional_change,
        "ph": args.ph,
        "result": args.result,
    }
    return ReportForm(**{k: v for k, v in given.items() if v is not None})


def _write_report(report: ShrinkageReport, cfg: AppConfig, out: Path | None, open_browser: bool) -> Path:
    target = out or Path(cfg.output_directory) / f"shrinkage-report-{report.id}.html"
    page = render_shrinkage_report(report, cfg.company)
    return print_document(page, target, PORTRAIT, size=cfg.page_size, open_browser=open_browser)


def _cmd_report_create(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    report = create_report(gateway, list_products(gateway), _report_form(args))
    path = _write_report(report, cfg, args.out, args.open)
    get_logger().info(f"created report id={report.id} result={report.result} -> {path}")
    return EXIT_SUCCESS_ALL


def _cmd_report_list(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    reports = list_reports(gateway)
    for r in reports:
        print(f"{r.id}\t{r.date}\t{r.product_code}\t{r.po_number}\t{r.item_number}\t{r.result}")
    get_logger().info(f"reports: {len(reports)}")
    return EXIT_SUCCESS_ALL


def _cmd_report_show(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    report = get_report(gateway, args.id)
    path = _write_report(report, cfg, args.out, args.open)
    get_logger().info(f"rendered {path}")
    return EXIT_SUCCESS_ALL


def _cmd_report_delete(args: argparse.Namespace, cfg: AppConfig, gateway: Gateway) -> int:
    delete_report(gateway, args.id)
    get_logger().info(f"deleted report id={args.id}")
    return EXIT_SUCCESS_ALL


# ---- main -------------------------------------------------------------------

def _source(args: argparse.Namespace) -> str:
    for attr in ("file", "directory", "id", "product_code"):
        value = getattr(args, attr, None)
        if value:
            return str(value.name if isinstance(value, Path) else value)
    return "-"


def _run(args: argparse.Namespace, cfg: AppConfig) -> int:
    writes = getattr(args, "writes", False) or getattr(args, "save", False)
    if not (writes or getattr(args, "needs_gateway", False)):
        return args.handler(args, cfg, None)
    with _open_gateway(cfg, writes=writes) as (gateway, mode):
        get_logger().info(f"mode={mode}")
        return args.handler(args, cfg, gateway)


def main(argv: list[str] | None = None) -> int:
    # None のときだけ sys.argv を読む (テストで main([]) を呼ぶため)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    logger = setup_logging(debug=args.debug)
    if args.debug:
        logger.debug("debug mode enabled")

    # .env を最優先で読み込む (DB 接続パラメータ優先順位保証)
    _load_env_file(Path(".env"), override=True)
    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    operation = f"{args.command} {args.action}"
    try:
        return _run(args, cfg)
    except (ParseError, GatewayError, OSError) as e:
        # 失敗した操作はエラーログにも残す
        error_log = ErrorLogBuffer()
        error_log.record(source=_source(args), operation=operation, error=e)
        error_log.flush()
        logger.error(f"{operation}: {e}")
        return EXIT_FATAL
    except (ValidationError, ProcessingError, NoDocumentError) as e:
        logger.error(f"{operation}: {e}")
        return EXIT_FATAL


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
