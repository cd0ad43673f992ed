"""Owner-scoped simulation storage.

Every query filters on both the simulation id and the owning user id, so a
simulation owned by someone else is reported exactly like one that does not
exist.
"""

import logging
import math
from typing import Any, Optional

from sqlalchemy import delete as sa_delete
from sqlmodel import Session, func, select

from .errors import NotFound, ValidationFailed
from .models import Simulation
from .utils import as_utc, utc_now

logger = logging.getLogger(__name__)

DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 100
MAX_PAGE = 100000

# Ids are 64-bit signed integers; anything outside can never match a row.
MIN_ID = 1
MAX_ID = 2**63 - 1

SORT_COLUMNS = {
    "created_at": Simulation.created_at,
    "updated_at": Simulation.updated_at,
    "name": Simulation.name,
}
DEFAULT_SORT = "created_at"
DEFAULT_ORDER = "desc"

UPDATABLE_FIELDS = ("name", "description", "configuration", "results", "notes")


def clamp_int(value: Any, fallback: int, minimum: int, maximum: int) -> int:
    """Parse ``value`` as an int and clamp it; unparsable input yields ``fallback``."""

    if value is None or isinstance(value, bool):
        return fallback
    try:
        number = int(str(value).strip())
    except ValueError:
        return fallback
    return max(minimum, min(maximum, number))


def normalize_sort(sort_by: Optional[str]) -> str:
    return sort_by if sort_by in SORT_COLUMNS else DEFAULT_SORT


def normalize_order(order: Optional[str]) -> str:
    return "asc" if order == "asc" else DEFAULT_ORDER


def placeholder_name() -> str:
    return f"Simulation {utc_now():%Y-%m-%d %H:%M}"


def list_simulations(
    session: Session,
    user_id: int,
    *,
    page: Any = None,
    per_page: Any = None,
    sort_by: Optional[str] = None,
    order: Optional[str] = None,
) -> dict[str, Any]:
    page_number = clamp_int(page, DEFAULT_PAGE, 1, MAX_PAGE)
    page_size = clamp_int(per_page, DEFAULT_PER_PAGE, 1, MAX_PER_PAGE)
    column = SORT_COLUMNS[normalize_sort(sort_by)]
    direction = normalize_order(order)

    ordering = (column.asc(), Simulation.id.asc()) if direction == "asc" else (column.desc(), Simulation.id.desc())
    stmt = (
        select(Simulation)
        .where(Simulation.user_id == user_id)
        .order_by(*ordering)
        .offset((page_number - 1) * page_size)
        .limit(page_size)
    )
    items = session.exec(stmt).all()
    total = session.exec(select(func.count()).select_from(Simulation).where(Simulation.user_id == user_id)).one()
    return {
        "data": [serialize_simulation(sim) for sim in items],
        "meta": {
            "total": total,
            "page": page_number,
            "per_page": page_size,
            "total_pages": math.ceil(total / page_size),
        },
    }


def create_simulation(
    session: Session,
    user_id: int,
    *,
    configuration: Any,
    name: Optional[str] = None,
    description: Optional[str] = None,
    results: Any = None,
    notes: Optional[str] = None,
) -> Simulation:
    if not isinstance(configuration, dict):
        raise ValidationFailed(
            "configuration is required and must be an object",
            errors={"configuration": ["The configuration field is required and must be an object."]},
        )
    sim = Simulation(
        user_id=user_id,
        name=name or placeholder_name(),
        description=description or None,
        configuration=configuration,
        results=results,
        notes=notes or None,
    )
    session.add(sim)
    session.commit()
    session.refresh(sim)
    logger.info("created simulation id=%s user=%s", sim.id, user_id)
    return sim


def get_simulation(session: Session, user_id: int, simulation_id: int) -> Simulation:
    if not MIN_ID <= simulation_id <= MAX_ID:
        raise NotFound("Simulation not found")
    stmt = select(Simulation).where(Simulation.id == simulation_id).where(Simulation.user_id == user_id)
    sim = session.exec(stmt).first()
    if sim is None:
        raise NotFound("Simulation not found")
    return sim


def update_simulation(session: Session, user_id: int, simulation_id: int, fields: dict[str, Any]) -> Simulation:
    """Apply only the keys present in ``fields``; everything else keeps its stored value."""

    sim = get_simulation(session, user_id, simulation_id)
    if "configuration" in fields and not isinstance(fields["configuration"], dict):
        raise ValidationFailed(errors={"configuration": ["The configuration must be an object."]})
    for key in UPDATABLE_FIELDS:
        if key in fields:
            setattr(sim, key, fields[key])
    sim.updated_at = utc_now()
    session.add(sim)
    session.commit()
    session.refresh(sim)
    return sim


def delete_simulation(session: Session, user_id: int, simulation_id: int) -> None:
    sim = get_simulation(session, user_id, simulation_id)
    session.delete(sim)
    session.commit()


def _integral(raw: Any) -> Optional[int]:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str):
        text = raw.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            raw = float(text)
        except ValueError:
            return None
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    return None


def coerce_ids(raw_ids: Any) -> list[int]:
    """Keep integer-valued entries that fit the id column, dropping anything else."""

    if not isinstance(raw_ids, (list, tuple)) or not raw_ids:
        raise ValidationFailed("ids array is required", errors={"ids": ["The ids field must be a non-empty array."]})
    ids: list[int] = []
    for raw in raw_ids:
        value = _integral(raw)
        if value is not None and MIN_ID <= value <= MAX_ID:
            ids.append(value)
    return ids


def bulk_delete_simulations(session: Session, user_id: int, raw_ids: Any) -> int:
    ids = coerce_ids(raw_ids)
    if not ids:
        return 0
    stmt = sa_delete(Simulation).where(Simulation.id.in_(ids)).where(Simulation.user_id == user_id)
    result = session.exec(stmt)
    session.commit()
    logger.info("bulk delete user=%s requested=%s deleted=%s", user_id, len(ids), result.rowcount)
    return result.rowcount


def serialize_simulation(sim: Simulation) -> dict[str, Any]:
    data = sim.model_dump()
    data["created_at"] = as_utc(sim.created_at)
    data["updated_at"] = as_utc(sim.updated_at)
    return data
