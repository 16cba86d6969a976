"""
Suite runner.

Sends each request of a suite in order, runs an assertion chain on every
response and records the results in a run report.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from dataclasses import asdict, replace
from typing import IO, Any

import aiohttp
from rich.console import Console
from rich.markup import escape

from ..assertions import Assert, Expression, Part, Predicate, dsl
from ..errors import AssayError
from ..reporting import (
    LogSettings,
    RequestRecord,
    RequestStatus,
    RunReport,
    compute_suite_hash,
)
from ..transport import AuthConfig, HTTPClient
from .models import ExpectCheck, RequestStep, Suite

logger = logging.getLogger(__name__)

ENV_PATTERN = re.compile(r"\{\{env\.(\w+)\}\}")


# ─────────────────────────────────────────────────────────────────────────────
# Interpolation
# ─────────────────────────────────────────────────────────────────────────────

def interpolate_value(value: Any, env: dict[str, Any]) -> Any:
    """
    Replace ``{{env.NAME}}`` placeholders in strings, dicts and lists.

    Names resolve against ``env`` first, then the process environment.
    Unknown names are left as written.
    """
    if isinstance(value, str):
        def replace_env(match: re.Match) -> str:
            var_name = match.group(1)
            if var_name in env:
                return str(env[var_name])
            return os.environ.get(var_name, match.group(0))
        return ENV_PATTERN.sub(replace_env, value)
    elif isinstance(value, dict):
        return {k: interpolate_value(v, env) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_value(v, env) for v in value]
    return value


def interpolate_auth_config(auth: AuthConfig | None, env: dict[str, Any]) -> AuthConfig | None:
    """Interpolate environment variables in auth config."""
    if auth is None:
        return None
    return replace(
        auth,
        token=interpolate_value(auth.token, env),
        key=interpolate_value(auth.key, env),
        username=interpolate_value(auth.username, env),
        password=interpolate_value(auth.password, env),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Expectations
# ─────────────────────────────────────────────────────────────────────────────

# Parts whose string values are read as JSON text by 'is' and 'is_not'
_JSON_PARTS = {Part.JSON_BODY, Part.JSON_PATH}


def build_expression(check: ExpectCheck) -> Expression:
    """Turn a suite expectation into a chain expression."""
    predicate = check.predicate
    value = check.value

    if predicate is Predicate.IS_BETWEEN:
        low, high = value
        return dsl.is_between(low, high)
    if predicate is Predicate.EXISTS:
        return dsl.exists()
    if predicate is Predicate.DOES_NOT_EXIST:
        return dsl.does_not_exist()
    if predicate in (Predicate.IS, Predicate.IS_NOT) and check.part in _JSON_PARTS:
        if isinstance(value, str):
            # A YAML string is a JSON string value, not JSON text
            value = json.dumps(value)
    return Expression(predicate, value)


def attach_check(chain: Assert, check: ExpectCheck, expression: Expression) -> Assert:
    """Attach ``expression`` to the chain method for the check's part."""
    if check.part is Part.HEADER:
        return chain.header(check.name, expression)
    if check.part is Part.JSON_PATH:
        return chain.json_path(check.path, expression)
    return getattr(chain, check.part.key)(expression)


# ─────────────────────────────────────────────────────────────────────────────
# Runner
# ─────────────────────────────────────────────────────────────────────────────

async def run_suite(
    suite: Suite,
    log_settings: LogSettings | None = None,
    stream: IO[str] | None = None,
    base_url: str | None = None,
    console: Console | None = None,
) -> RunReport:
    """
    Execute a suite and return its run report.

    Args:
        suite: The parsed suite
        log_settings: Overrides the suite's own log settings
        stream: Output stream for chain outcomes, defaults to stdout
        base_url: Overrides the suite's base URL
        console: If given, progress lines are printed here

    Under fail-fast settings the run stops at the first failed or errored
    request and the rest are recorded as skipped.

    Raises:
        InvalidURLError: If the base URL is not an absolute http(s) URL
        InvalidHeaderError: If a default header is illegal
    """
    settings = log_settings or suite.log
    env = suite.env
    resolved_url = interpolate_value(base_url or suite.base_url, env)

    client = HTTPClient(
        resolved_url,
        headers=interpolate_value(suite.defaults.headers, env),
        auth=interpolate_auth_config(suite.auth, env),
        log_settings=settings,
        timeout_ms=suite.defaults.timeout_ms,
        stream=stream,
    )

    report = RunReport(
        suite_name=suite.name,
        suite_version=suite.version,
        suite_hash=compute_suite_hash(asdict(suite)),
        base_url=str(client.base_url),
    )
    report.start()
    logger.info(f"Running suite {suite.name!r} against {client.base_url} ({len(suite.requests)} requests)")

    stopped = False
    async with client:
        for step in suite.requests:
            record = RequestRecord(request_id=step.id, method=step.method.value)
            report.add_request(record)

            if stopped:
                record.complete(RequestStatus.SKIPPED)
                continue

            if console is not None:
                console.print(
                    f"▶ [bold]Request:[/bold] {escape(step.id)} "
                    f"({step.method.value} {escape(step.path or '/')})"
                )

            await _run_request(client, step, record, env)

            if console is not None:
                _print_record(console, record)

            if settings.fail_fast and record.status in (RequestStatus.FAILED, RequestStatus.ERROR):
                logger.info(f"Stopping run after {record.status.value} request {step.id!r}")
                stopped = True

    report.complete()
    logger.info(f"Suite {suite.name!r} finished: {report.status.value}")
    return report


async def _run_request(
    client: HTTPClient,
    step: RequestStep,
    record: RequestRecord,
    env: dict[str, Any],
) -> None:
    record.start()
    try:
        request = client.request(step.method.value, interpolate_value(step.path, env))
        record.url = str(request.url)
        if step.headers:
            request.headers(interpolate_value(step.headers, env))
        if step.has_payload:
            request.payload(interpolate_value(step.payload, env))

        chain = await request.check()
        record.status_code = chain.snapshot.status
        record.response_time_ms = chain.snapshot.response_time_ms

        for check in step.expect:
            resolved = replace(check, value=interpolate_value(check.value, env))
            attach_check(chain, resolved, build_expression(resolved))

        record.chain = chain.finish()
        record.complete(RequestStatus.PASSED if record.chain.ok else RequestStatus.FAILED)

    except AssayError as e:
        record.error_message = f"{type(e).__name__}: {e}"
        record.complete(RequestStatus.ERROR)
        logger.warning(f"Request {step.id!r} could not be checked: {e}")

    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        record.error_message = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
        record.complete(RequestStatus.ERROR)
        logger.warning(f"Request {step.id!r} failed: {record.error_message}")


def _print_record(console: Console, record: RequestRecord) -> None:
    if record.status is RequestStatus.PASSED:
        console.print(f"  [green]✅ Passed[/green] ({record.chain.summary()})")
    elif record.status is RequestStatus.FAILED:
        console.print(f"  [red]❌ Failed:[/red] {escape(record.failure_message)}")
    else:
        console.print(f"  [red]❌ Error:[/red] {escape(record.error_message)}")
    console.print()
