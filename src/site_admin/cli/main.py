"""site-admin CLI — command-line interface for Site Admin.

Commands:
    tiers             Show the package tier table
    provision         Create a site on a package tier
    show              Show a site's package, features and slot usage
    update-features   Validate and save a site's feature selection
    assign-package    Move a site to another package tier
    deprovision       Remove a site and its feature selection
    nav               Show a site's admin navigation
    check             Validate a selection without saving it
    serve             Launch the site settings API
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import replace

import click

from site_admin import __version__
from site_admin.config import SiteAdminConfig, load_config
from site_admin.errors import FeatureAccessError, TierConfigError
from site_admin.features.validator import feature_usage, validate_and_normalize
from site_admin.models import SiteRecord, UserRole, catalog_sorted
from site_admin.packages.tiers import DEFAULT_TIER_TABLE, TierTable, load_tier_table
from site_admin.settings.service import SiteSettingsService, UpdateResult


def _resolve_cfg(config_path: str | None) -> SiteAdminConfig:
    """Load config from site-admin.yaml (explicit path errors, discovery never does)."""
    if config_path is not None:
        try:
            return load_config(config_path)
        except (FileNotFoundError, ValueError) as e:
            click.echo(f"Error: {e}", err=True)
            sys.exit(1)
    try:
        return load_config()
    except Exception:
        return SiteAdminConfig()


def _service(config_path: str | None, db: str | None) -> SiteSettingsService:
    cfg = _resolve_cfg(config_path)
    if db is not None:
        cfg = replace(cfg, db_path=db)
    try:
        return SiteSettingsService.from_config(cfg)
    except (TierConfigError, FeatureAccessError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _table(config_path: str | None) -> TierTable:
    cfg = _resolve_cfg(config_path)
    if cfg.tiers_file is None:
        return DEFAULT_TIER_TABLE
    try:
        return load_tier_table(cfg.tiers_file)
    except TierConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


def _split(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _record_dict(svc: SiteSettingsService, record: SiteRecord) -> dict:
    data = record.model_dump(mode="json")
    data["usage"] = feature_usage(record.selection, svc.table).model_dump(mode="json")
    return data


def _echo_record(svc: SiteSettingsService, record: SiteRecord, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps(_record_dict(svc, record), indent=2))
        return
    usage = feature_usage(record.selection, svc.table)
    click.echo(f"Site:     {record.name} ({record.site_id})")
    click.echo(f"Package:  {record.tier}")
    click.echo(f"Order:    {', '.join(record.selection.order)}")
    slots = click.style(
        f"{usage.count}/{usage.max_features}",
        fg="green" if usage.has_minimum else "yellow",
    )
    click.echo(f"Features: {slots} (min {usage.min_features}, "
               f"{usage.remaining_slots} slot(s) left)")


def _finish(svc: SiteSettingsService, result: UpdateResult, json_output: bool) -> None:
    if result.error is not None:
        if json_output:
            click.echo(json.dumps(result.error.to_dict(), indent=2))
        else:
            click.echo(click.style("REJECTED", fg="red") + f"  {result.error.message}", err=True)
        sys.exit(1)
    assert result.record is not None
    _echo_record(svc, result.record, json_output)


_config_option = click.option("--config", "config_path", default=None,
                              help="Path to site-admin.yaml")
_db_option = click.option("--db", default=None, help="Path to the SQLite database")
_json_option = click.option("--json-output", is_flag=True, help="Output as JSON")


# --- Root group ---


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable info logging")
def cli(verbose: bool) -> None:
    """Site Admin: package tiers and feature access for tenant sites."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# --- tiers command ---


@cli.command()
@_config_option
@_json_option
def tiers(config_path: str | None, json_output: bool) -> None:
    """Show the package tier table."""
    table = _table(config_path)
    if json_output:
        data = [table.policy(t).model_dump(mode="json") for t in table.tiers()]
        for entry in data:
            entry["allowed_features"] = sorted(entry["allowed_features"])
        click.echo(json.dumps(data, indent=2))
        return
    for tier in table.tiers():
        policy = table.policy(tier)
        features = ", ".join(catalog_sorted(policy.allowed_features))
        click.echo(
            f"  {tier.value:<12} "
            + click.style(f"[{policy.min_features}-{policy.max_features}]", fg="cyan")
            + f"  {features}"
        )


# --- provision command ---


@cli.command()
@click.argument("site_id")
@click.option("--name", required=True, help="Display name of the site")
@click.option("--tier", default="basic", help="Package tier")
@click.option("--description", default="", help="Site description")
@_config_option
@_db_option
@_json_option
def provision(
    site_id: str,
    name: str,
    tier: str,
    description: str,
    config_path: str | None,
    db: str | None,
    json_output: bool,
) -> None:
    """Create a site on a package tier with its default features."""
    svc = _service(config_path, db)
    _finish(svc, svc.provision_site(site_id, name, tier=tier, description=description),
            json_output)


# --- show command ---


@cli.command()
@click.argument("site_id")
@_config_option
@_db_option
@_json_option
def show(site_id: str, config_path: str | None, db: str | None, json_output: bool) -> None:
    """Show a site's package, features and slot usage."""
    svc = _service(config_path, db)
    try:
        record = svc.get_site(site_id)
    except FeatureAccessError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    _echo_record(svc, record, json_output)


# --- update-features command ---


@cli.command("update-features")
@click.argument("site_id")
@click.option("--features", "-f", required=True,
              help="Comma-separated features, e.g. products,categories")
@click.option("--order", "-o", default=None, help="Comma-separated navigation order")
@_config_option
@_db_option
@_json_option
def update_features(
    site_id: str,
    features: str,
    order: str | None,
    config_path: str | None,
    db: str | None,
    json_output: bool,
) -> None:
    """Validate and save a site's feature selection."""
    svc = _service(config_path, db)
    _finish(svc, svc.update_site_features(site_id, _split(features), _split(order)),
            json_output)


# --- assign-package command ---


@cli.command("assign-package")
@click.argument("site_id")
@click.argument("tier")
@click.option("--features", "-f", default=None,
              help="Comma-separated features (default: keep what the tier allows)")
@click.option("--order", "-o", default=None, help="Comma-separated navigation order")
@_config_option
@_db_option
@_json_option
def assign_package(
    site_id: str,
    tier: str,
    features: str | None,
    order: str | None,
    config_path: str | None,
    db: str | None,
    json_output: bool,
) -> None:
    """Move a site to another package tier (runs as super admin)."""
    svc = _service(config_path, db)
    result = svc.assign_package(
        site_id, tier, UserRole.SUPER_ADMIN,
        requested_features=_split(features) if features is not None else None,
        requested_order=_split(order) if order is not None else None,
    )
    _finish(svc, result, json_output)


# --- deprovision command ---


@cli.command()
@click.argument("site_id")
@click.confirmation_option(prompt="Remove this site and its feature selection?")
@_config_option
@_db_option
@_json_option
def deprovision(
    site_id: str,
    config_path: str | None,
    db: str | None,
    json_output: bool,
) -> None:
    """Remove a site and its feature selection (runs as super admin)."""
    svc = _service(config_path, db)
    result = svc.deprovision_site(site_id, UserRole.SUPER_ADMIN)
    if result.error is not None:
        _finish(svc, result, json_output)
    if json_output:
        click.echo(json.dumps({"site_id": site_id, "removed": True}))
    else:
        click.echo(click.style("REMOVED", fg="green") + f"  {site_id}")


# --- nav command ---


@cli.command()
@click.argument("site_id")
@click.option(
    "--role", type=click.Choice([r.value for r in UserRole]), default=UserRole.ADMIN.value,
    help="Role of the viewing user",
)
@_config_option
@_db_option
@_json_option
def nav(
    site_id: str,
    role: str,
    config_path: str | None,
    db: str | None,
    json_output: bool,
) -> None:
    """Show a site's admin navigation as the given role sees it."""
    svc = _service(config_path, db)
    try:
        items = svc.navigation_for(site_id, UserRole(role))
    except FeatureAccessError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    if json_output:
        click.echo(json.dumps([i.model_dump(mode="json") for i in items], indent=2))
        return
    for i, item in enumerate(items, start=1):
        click.echo(f"  {i:>2}. {item.label:<18} {item.href}")


# --- check command ---


@cli.command()
@click.argument("tier")
@click.option("--features", "-f", required=True, help="Comma-separated features")
@click.option("--order", "-o", default=None, help="Comma-separated navigation order")
@_config_option
@_json_option
def check(
    tier: str,
    features: str,
    order: str | None,
    config_path: str | None,
    json_output: bool,
) -> None:
    """Validate a feature selection against a tier without saving it."""
    result = validate_and_normalize(tier, _split(features), _split(order), _table(config_path))
    if result.error is not None:
        if json_output:
            click.echo(json.dumps(result.error.to_dict(), indent=2))
        else:
            click.echo(click.style("INVALID", fg="red") + f"  {result.error.message}")
        sys.exit(1)
    assert result.selection is not None
    if json_output:
        click.echo(json.dumps(result.selection.model_dump(mode="json"), indent=2))
    else:
        click.echo(click.style("VALID", fg="green")
                   + f"  {', '.join(result.selection.order)}")


# --- serve command ---


@cli.command()
@click.option("--host", default=None, help="Bind address")
@click.option("--port", default=None, type=int, help="Port")
@click.option("--dev", is_flag=True, help="Enable CORS for a local frontend")
@_config_option
@_db_option
def serve(
    host: str | None,
    port: int | None,
    dev: bool,
    config_path: str | None,
    db: str | None,
) -> None:
    """Launch the site settings API."""
    cfg = _resolve_cfg(config_path).with_env()

    try:
        import uvicorn
    except ImportError:
        click.echo(
            "The API server requires extra dependencies. Install with:\n"
            "  pip install site-admin[web]",
            err=True,
        )
        sys.exit(1)

    from site_admin.web.app import create_app

    config = SiteAdminConfig(
        config_path=cfg.config_path,
        db_path=db or cfg.db_path,
        tiers_file=cfg.tiers_file,
        host=host or cfg.host,
        port=port or cfg.port,
        dev_mode=dev or cfg.dev_mode,
    )
    app = create_app(config)

    click.echo(f"Site Admin API — http://{config.host}:{config.port}")
    uvicorn.run(app, host=config.host, port=config.port, log_level="info")
