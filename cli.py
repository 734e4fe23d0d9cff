#!/usr/bin/env python3
"""
CLI для управления проверкой статей.

Использование:
    python cli.py init-db
    python cli.py show-config
    python cli.py status <article_id>
    python cli.py history <article_id>
    python cli.py decide <article_id> --decision APPROVED --actor editor@example.com --reason "ok"
"""

import asyncio
import sys
from uuid import UUID

import click
from rich.console import Console
from rich.table import Table

from editorial_review.container import build_container
from editorial_review.domain.value_objects.review_decision import ReviewDecision
from editorial_review.infrastructure.config.database import create_engine, create_tables
from editorial_review.infrastructure.config.settings import get_settings
from editorial_review.shared.exceptions.domain_exceptions import DomainException
from editorial_review.shared.exceptions.infrastructure_exceptions import InfrastructureException
from editorial_review.shared.logging_config import setup_logging

console = Console()


def _run(coro):
    """Выполнить корутину, показывая ошибки домена без traceback."""
    try:
        return asyncio.run(coro)
    except (DomainException, InfrastructureException) as e:
        console.print(f"\n❌ [bold red]{type(e).__name__}[/bold red]: {e}")
        if e.current_status:
            console.print(f"Текущий статус: [yellow]{e.current_status}[/yellow]")
        sys.exit(1)


async def _with_container(action):
    container = build_container(get_settings())
    await container.start()
    try:
        return await action(container)
    finally:
        await container.close()


@click.group()
def cli():
    """Editorial Review CLI."""
    setup_logging(get_settings().log_level)


@cli.command('init-db')
def init_db():
    """Создать таблицы в PostgreSQL."""
    settings = get_settings()
    if settings.is_memory_backend():
        console.print("[yellow]⚠️  PERSISTENCE_BACKEND=memory: таблицы не нужны[/yellow]")
        return

    async def _init():
        engine = create_engine(settings)
        try:
            await create_tables(engine)
        finally:
            await engine.dispose()

    _run(_init())
    console.print("\n✅ [bold green]Таблицы созданы[/bold green]\n")


@cli.command('show-config')
def show_config():
    """Показать текущую конфигурацию."""
    settings = get_settings()

    table = Table(title="Editorial Review Config")
    table.add_column("Параметр", style="cyan")
    table.add_column("Значение", style="green")

    table.add_row("Persistence", settings.persistence_backend)
    table.add_row("Approval threshold", f"{settings.approval_threshold:.2f}")
    table.add_row("Rejection threshold", f"{settings.rejection_threshold:.2f}")
    table.add_row("Min quality score", f"{settings.min_quality_score:.2f}")
    table.add_row("Analysis engine", settings.analysis_engine_url)
    table.add_row("Analysis model", settings.analysis_model)
    table.add_row("Timeout / attempts", f"{settings.analysis_timeout_seconds}s / {settings.analysis_max_attempts}")
    table.add_row("Word count", f"{settings.min_word_count}-{settings.max_word_count}")
    table.add_row("Reviewers", ", ".join(sorted(settings.get_reviewers())) or "-")
    table.add_row("API key", "***" if settings.analysis_engine_api_key else "-")

    console.print(table)


@cli.command()
@click.argument('article_id', type=click.UUID)
def status(article_id: UUID):
    """Статус статьи и последний анализ."""
    state = _run(_with_container(lambda c: c.workflow.get_review_state(article_id)))

    article = state.article
    console.print(f"\n📄 [bold]{article.title}[/bold]")
    console.print(f"Статус: [bold cyan]{article.status.value}[/bold cyan]")
    console.print(f"Обновлено: {article.updated_at:%Y-%m-%d %H:%M:%S}")

    analysis = state.latest_analysis
    if analysis is None:
        console.print("Анализ: [dim]нет[/dim]\n")
        return

    decision = analysis.decision.value if analysis.decision else "-"
    console.print(f"Анализ: {decision} (confidence {analysis.confidence_score:.2f}, {analysis.ai_model})")
    for name, value in analysis.scores().items():
        shown = f"{value:.2f}" if value is not None else "-"
        console.print(f"  {name}: {shown}")
    if analysis.flagged_issues:
        console.print(f"  [yellow]Проблемы:[/yellow] {', '.join(analysis.flagged_issues)}")
    console.print()


@cli.command()
@click.argument('article_id', type=click.UUID)
def history(article_id: UUID):
    """Журнал переходов статьи."""
    entries = _run(_with_container(lambda c: c.workflow.get_history(article_id)))

    table = Table(title=f"History {article_id}")
    table.add_column("#", justify="right")
    table.add_column("Действие", style="cyan")
    table.add_column("Переход")
    table.add_column("Кто", style="magenta")
    table.add_column("Причина")
    table.add_column("Время")

    for entry in entries:
        source = entry.from_status.value if entry.from_status else "-"
        table.add_row(
            str(entry.sequence),
            entry.action.value,
            f"{source} → {entry.to_status.value}",
            entry.performed_by,
            entry.reason or "",
            f"{entry.created_at:%Y-%m-%d %H:%M:%S}",
        )

    console.print(table)


@cli.command()
@click.argument('article_id', type=click.UUID)
@click.option('--decision', required=True, type=click.Choice(['APPROVED', 'REJECTED']), help='Решение')
@click.option('--actor', required=True, help='Идентификатор ревьюера')
@click.option('--reason', required=True, help='Причина решения')
@click.option('--notes', default=None, help='Заметки')
def decide(article_id: UUID, decision: str, actor: str, reason: str, notes: str):
    """
    Ручное решение по статье.

    Примеры:
        python cli.py decide <id> --decision APPROVED --actor editor@example.com --reason "Проверено"
    """
    article = _run(_with_container(
        lambda c: c.workflow.manual_decide(article_id, ReviewDecision(decision), actor, reason, notes)
    ))
    console.print(f"\n✅ [bold green]Готово![/bold green] Статус: [bold]{article.status.value}[/bold]\n")


if __name__ == '__main__':
    cli()
