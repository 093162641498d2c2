# app/services/statements/generator.py
"""
Year-end giving statement generation.

`generate_statements(ctx, request, repo)` runs the whole batch:

    validating -> resolving households -> per-household loop -> summarizing

and returns one outcome variant (see types.py). A failure for one household
(missing data, render error, database error) is recorded in the summary's
`errors` and the loop moves on; partial success is the normal result.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable, List, Optional

from app import settings
from app.services.permissions import has_permission
from app.services.statements.aggregation import (
    HouseholdDataError,
    aggregate_household_giving,
    tax_year_bounds,
)
from app.services.statements.numbering import generate_statement_number
from app.services.statements.pdf import render_statement_pdf
from app.services.statements.persistence import pdf_to_data_url
from app.services.statements.repository import StatementRepository
from app.services.statements.types import (
    MANAGE_STATEMENTS,
    Confirmation,
    GenerateRequest,
    GenerationFailure,
    GenerationOutcome,
    PreviewPdf,
    StatementContext,
    StatementError,
    StatementResult,
    Summary,
)
from app.services.statements.validation import ValidationPolicy, validate_church_tax_info

logger = logging.getLogger(__name__)

GENERATE_FORBIDDEN = "You do not have permission to generate giving statements"

MIN_YEAR, MAX_YEAR = 1900, 9999

Renderer = Callable[..., bytes]


def generate_statements(
    ctx: StatementContext,
    request: GenerateRequest,
    repo: StatementRepository,
    *,
    policy: Optional[ValidationPolicy] = None,
    renderer: Renderer = render_statement_pdf,
    generated_on: Optional[date] = None,
) -> GenerationOutcome:
    if policy is None:
        policy = ValidationPolicy.parse(settings.statement_validation_policy())

    # ---- VALIDATING ----
    if not has_permission(ctx.permissions, MANAGE_STATEMENTS):
        return GenerationFailure(403, GENERATE_FORBIDDEN)

    year = request.year
    if isinstance(year, bool) or not isinstance(year, int) or not (MIN_YEAR <= year <= MAX_YEAR):
        return GenerationFailure(400, "Year is required and must be a number")

    church = repo.get_church(ctx.church_id)
    if church is None:
        return GenerationFailure(404, "Church not found")

    validation = validate_church_tax_info(church)
    if not validation.valid:
        if policy is ValidationPolicy.STRICT:
            return GenerationFailure(
                400,
                "Church tax information is incomplete",
                details=validation.message,
                missing=validation.missing,
            )
        if not request.skip_validation:
            return Confirmation(missing=validation.missing, message=validation.message)
        logger.info(
            "generating statements for church=%s despite missing tax fields %s (confirmed by %s)",
            ctx.church_id, validation.missing, ctx.actor_id,
        )

    # ---- RESOLVING_HOUSEHOLDS ----
    start, end = tax_year_bounds(year)
    if request.household_id:
        household_ids: List[str] = [request.household_id]
    else:
        household_ids = repo.resolve_household_ids(ctx.church_id, start, end)

    if not household_ids:
        return GenerationFailure(
            404,
            "No giving records found",
            details=f"No households have giving records for {year}",
        )

    single_preview = request.preview and len(household_ids) == 1
    summary = Summary(year=year, preview=request.preview)

    # ---- PER_HOUSEHOLD_LOOP ----
    for hid in household_ids:
        household = None
        try:
            household = repo.get_household(ctx.church_id, hid)
            if household is None:
                summary.errors.append(StatementError(household_id=hid, error="Household not found"))
                continue

            giving = aggregate_household_giving(repo, ctx.church_id, hid, year)
            number = generate_statement_number(year, hid)

            pdf = renderer(
                church=church,
                household=household,
                year=year,
                start_date=start,
                end_date=end,
                summary=giving,
                statement_number=number,
                generated_on=generated_on,
            )

            if single_preview:
                return PreviewPdf(content=pdf, filename=f"giving-statement-{year}-preview.pdf")

            if request.preview:
                summary.results.append(StatementResult(
                    household_id=hid,
                    household_name=household.name,
                    statement_number=number,
                    total_amount=giving.total,
                    status="preview",
                ))
                continue

            stored = repo.upsert_statement(
                church_id=ctx.church_id,
                household_id=hid,
                year=year,
                total=giving.total,
                statement_number=number,
                pdf_ref=pdf_to_data_url(pdf),
                actor_id=ctx.actor_id,
            )
            repo.commit()
            summary.results.append(StatementResult(
                household_id=hid,
                household_name=household.name,
                statement_number=number,
                total_amount=giving.total,
                status="created" if stored.created else "updated",
                statement_id=stored.id,
            ))
        except HouseholdDataError as exc:
            summary.errors.append(StatementError(
                household_id=hid,
                household_name=household.name if household else None,
                error=str(exc),
            ))
        except Exception as exc:
            logger.exception("Error generating statement for household %s", hid)
            repo.rollback()
            summary.errors.append(StatementError(
                household_id=hid,
                household_name=household.name if household else None,
                error=str(exc) or type(exc).__name__,
            ))

    # ---- SUMMARIZING ----
    logger.info(
        "statement generation church=%s year=%s preview=%s generated=%s errors=%s",
        ctx.church_id, year, request.preview, summary.generated, len(summary.errors),
    )
    return summary
