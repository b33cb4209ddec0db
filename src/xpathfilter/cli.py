"""CLI 入口"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .common.config import Config, DateListingsConfig, ParserConfig
from .common.constants import (
    LISTING_DATE_FIELD,
    MULTI_VALUE_SEPARATOR,
    PUBLISH_DATE_KEY,
    REVERSE_DATE_FIELD,
)
from .common.exceptions import DateRuleError, IndexingError, RuleValidationError
from .common.logger import get_logger
from .common.types import IndexDocument, ParseResult, WebPage
from .index.date_normalizer import DateListingsFilter
from .index.date_rules import load_date_rules
from .index.emitter import XPathIndexingFilter
from .parse.extractor import XPathParseFilter
from .rules.loader import load_rule_set
from .rules.models import RuleSet

# 日志器
logger = get_logger(__name__)

app = typer.Typer(
    name="xpathfilter",
    help="XPathFilter CLI - 规则校验与本地提取调试工具",
    add_completion=False,
)
console = Console()


def _load_rules_or_exit(rules_file: str) -> RuleSet:
    try:
        return load_rule_set(rules_file)
    except RuleValidationError as e:
        console.print(Panel(str(e), title="规则无效", style="red"))
        raise typer.Exit(1)


def _describe_policy(concat: bool, delimiter: str, trim: bool) -> str:
    policy = f"concat {delimiter!r}" if concat else "-"
    return f"{policy} / {'trim' if trim else '-'}"


def _build_rules_table(rule_set: RuleSet) -> Table:
    """构建规则预览表格。"""
    table = Table(title="XPath 规则")
    table.add_column("#", style="dim")
    table.add_column("URL 正则", style="cyan")
    table.add_column("内容门控", style="yellow")
    table.add_column("字段", style="green")
    table.add_column("XPath", style="magenta")
    table.add_column("concat/trim", style="blue")

    for index, group in enumerate(rule_set):
        gate = ""
        if group.content_filter_xpath:
            gate = f"{group.content_filter_xpath} ~ {group.content_filter_regex or '*'}"
        for position, rule in enumerate(group.fields):
            table.add_row(
                str(index) if position == 0 else "",
                group.url_filter_regex if position == 0 else "",
                gate if position == 0 else "",
                f"{rule.name} ({rule.type.value})",
                rule.xpath,
                _describe_policy(rule.concat, rule.concat_delim, rule.trim),
            )
    return table


@app.command("check")
def check_command(
    rules_file: str = typer.Argument(..., help="规则文件路径（XML 或 YAML）"),
):
    """
    校验规则文件

    示例:
        xpathfilter check conf/xpath-rules.xml
    """
    rule_set = _load_rules_or_exit(rules_file)
    console.print(_build_rules_table(rule_set))
    console.print(f"[green]规则有效[/green]: {len(rule_set)} 个规则组")


@app.command("extract")
def extract_command(
    rules_file: str = typer.Argument(..., help="规则文件路径（XML 或 YAML）"),
    page_file: str = typer.Argument(..., help="本地页面文件"),
    url: str = typer.Option(..., "--url", "-u", help="页面 URL（用于 URL 门控）"),
    content_type: str = typer.Option("text/html", "--content-type", "-t", help="内容类型"),
    encoding: str | None = typer.Option(None, "--encoding", "-e", help="页面原始编码"),
    default_encoding: str = typer.Option("UTF-8", "--default-encoding", help="默认编码"),
    multivalued: bool = typer.Option(
        False,
        "--multivalued/--no-multivalued",
        help="非拼接模式下累积多个值",
    ),
):
    """
    对本地页面运行解析阶段与索引阶段

    示例:
        xpathfilter extract rules.xml page.html --url "https://example.com/a"
    """
    rule_set = _load_rules_or_exit(rules_file)
    path = Path(page_file)
    if not path.is_file():
        console.print(f"[red]页面文件不存在[/red]: {page_file}")
        raise typer.Exit(1)

    config = Config(
        parser=ParserConfig(
            default_encoding=default_encoding,
            rules_file=rules_file,
            multivalued=multivalued,
        ),
    )
    page = WebPage(
        url=url,
        content=path.read_bytes(),
        content_type=content_type,
        original_encoding=encoding,
    )

    parse = XPathParseFilter(config, rule_set).filter(url, page, ParseResult(base_url=url))
    if not parse.is_success:
        console.print(Panel(parse.message or "", title="解析失败", style="red"))
        raise typer.Exit(1)

    carrier = Table(title="元数据载体")
    carrier.add_column("键", style="cyan")
    carrier.add_column("值", style="green")
    for key, value in page.metadata.items():
        carrier.add_row(
            key.decode("utf-8", errors="replace"),
            value.decode("utf-8", errors="replace").replace(MULTI_VALUE_SEPARATOR, " | "),
        )
    console.print(carrier)

    doc = XPathIndexingFilter(config, rule_set).filter(IndexDocument(), url, page)
    emitted = Table(title="索引文档")
    emitted.add_column("字段", style="cyan")
    emitted.add_column("值", style="green")
    for name in doc.field_names():
        for value in doc.get_values(name):
            emitted.add_row(name, value)
    console.print(emitted)


@app.command("date")
def date_command(
    date_rules_file: str = typer.Argument(..., help="日期规则文件（host|key=value）"),
    url: str = typer.Option(..., "--url", "-u", help="页面 URL"),
    raw_date: str = typer.Option(..., "--date", "-d", help="原始发布日期字符串"),
    repr_url: str | None = typer.Option(None, "--repr-url", help="页面代表 URL（优先用于主机解析）"),
    default_format: str = typer.Option("dd-MM-yyyy", "--default-format", help="默认日期模式"),
    output_format: str = typer.Option("yyyy-MM-dd", "--output-format", help="输出日期模式"),
):
    """
    对单个日期运行日期规范化

    示例:
        xpathfilter date conf/date-rules.txt --url "http://example.com/x" --date "27 11 2015"
    """
    try:
        rules = load_date_rules(date_rules_file)
        date_filter = DateListingsFilter(
            Config(
                date=DateListingsConfig(
                    rules_file=date_rules_file,
                    default_format=default_format,
                    output_format=output_format,
                )
            ),
            rules,
        )
        page = WebPage(url=url, repr_url=repr_url, metadata={PUBLISH_DATE_KEY: raw_date.encode("utf-8")})
        doc = date_filter.filter(IndexDocument(), url, page)
    except (DateRuleError, IndexingError) as e:
        console.print(Panel(str(e), title="日期规范化失败", style="red"))
        raise typer.Exit(1)

    if doc is None:
        console.print("[yellow]日期无法解析，文档被丢弃[/yellow]")
        raise typer.Exit(1)

    console.print(f"listingDate = {doc.get(LISTING_DATE_FIELD)}")
    console.print(f"reverseDate = {doc.get(REVERSE_DATE_FIELD)}")


def main():
    """CLI 入口点

    供 pyproject.toml 中 [project.scripts] 调用。
    """
    app()


if __name__ == "__main__":
    main()
