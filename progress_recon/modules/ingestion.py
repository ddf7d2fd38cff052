"""
Ingestion Module for the Progress Reconciliation engine.

Converts loosely-typed rows (dicts from the data store, pandas rows, CSV
exports) into typed Project / Activity / KPIRecord entities.

Rows address the same field by several names ('zone', 'Zone Ref', 'Zone #')
and may carry a nested 'raw' bag of original column values. All of that is
resolved here through read_field(); the engine only sees typed entities.
"""
import logging
import re
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from progress_recon.config import ProgressConfig, get_config
from progress_recon.domain.entities import Activity, InputType, KPIRecord, KPIStatus, Project
from progress_recon.domain.exceptions import IngestionError

logger = logging.getLogger(__name__)

RAW_BAG_KEY = "raw"
EMPTY_MARKERS = {"", "n/a", "na", "null", "none", "nan", "-"}
TRUE_MARKERS = {"true", "1", "yes", "y", "t"}

# Any one of these columns must be present for a file to be attributable
CODE_FIELDS = ("project_code", "project_full_code")


# =============================================================================
# Field access
# =============================================================================

def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in EMPTY_MARKERS
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def read_field(row: Mapping, aliases: Sequence[str], default: Any = None) -> Any:
    """
    First non-empty value among a row's alias columns.

    The row itself is searched first, then its nested 'raw' bag.

    Args:
        row: Mapping of column name -> value
        aliases: Column spellings in precedence order
        default: Returned when no alias holds a value

    Returns:
        The raw value (not parsed)
    """
    bags = [row]
    raw = row.get(RAW_BAG_KEY)
    if isinstance(raw, Mapping):
        bags.append(raw)

    for bag in bags:
        for alias in aliases:
            if alias in bag and not _is_empty(bag[alias]):
                return bag[alias]
    return default


# =============================================================================
# Value parsing
# =============================================================================

def parse_number(value: Any, default: Optional[float] = 0.0) -> Optional[float]:
    """
    Tolerant number parsing.

    Handles:
        1250.5          -> 1250.5
        "1,250.50"      -> 1250.5
        "AED 1,000"     -> 1000.0
        "12.5%"         -> 12.5
        "1e5"           -> 100000.0
        None, "", "N/A" -> default
        "garbage"       -> default
    """
    if isinstance(value, bool):
        return float(value)
    if _is_empty(value):
        return default
    if isinstance(value, (int, float)):
        return float(value)

    try:
        number = float(str(value).strip())
    except ValueError:
        text = re.sub(r'[^\d.\-]', '', str(value))
        try:
            number = float(text)
        except ValueError:
            return default
    if pd.isna(number) or number in (float('inf'), float('-inf')):
        return default
    return number


def parse_bool(value: Any) -> bool:
    """TRUE/true/1/yes -> True; everything else -> False."""
    if isinstance(value, bool):
        return value
    if _is_empty(value):
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in TRUE_MARKERS


def parse_datetime(value: Any) -> Optional[datetime]:
    """Parse a timestamp; unparseable values give None."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if _is_empty(value):
        return None
    parsed = pd.to_datetime(str(value).strip(), errors='coerce')
    if pd.isna(parsed):
        return None
    return parsed.to_pydatetime()


def parse_date(value: Any) -> Optional[date]:
    """Parse a calendar date; unparseable values give None."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    parsed = parse_datetime(value)
    return parsed.date() if parsed else None


def parse_text(value: Any) -> str:
    if _is_empty(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # zone '1' read by pandas as 1.0
        return str(int(value))
    return str(value).strip()


# =============================================================================
# Row converters
# =============================================================================

class RowReader:
    """Reads entity fields from a row using the configured alias lists."""

    def __init__(self, config: Optional[ProgressConfig] = None):
        self.config = config or get_config()

    def field(self, row: Mapping, name: str, default: Any = None) -> Any:
        return read_field(row, self.config.get_field_aliases(name), default)

    def text(self, row: Mapping, name: str) -> str:
        return parse_text(self.field(row, name))

    def number(self, row: Mapping, name: str, default: Optional[float] = 0.0) -> Optional[float]:
        return parse_number(self.field(row, name), default)

    def flag(self, row: Mapping, name: str) -> bool:
        return parse_bool(self.field(row, name))

    def day(self, row: Mapping, name: str) -> Optional[date]:
        return parse_date(self.field(row, name))

    def project(self, row: Mapping) -> Project:
        """
        Raises:
            IngestionError: If the row carries no project code
        """
        code = self.text(row, 'project_code')
        if not code:
            raise IngestionError("project row", f"no project code in {sorted(map(str, row.keys()))}")
        return Project(
            code=code,
            sub_code=self.text(row, 'project_sub_code'),
            name=self.text(row, 'project_name'),
            contract_amount=self.number(row, 'contract_amount', default=None),
            status=self.text(row, 'project_status') or "active",
            responsible_division=self.text(row, 'responsible_division'),
            created_at=parse_datetime(self.field(row, 'created_at')),
            updated_at=parse_datetime(self.field(row, 'updated_at')),
        )

    def activity(self, row: Mapping) -> Activity:
        return Activity(
            id=self.text(row, 'id') or None,
            project_code=self.text(row, 'project_code'),
            project_sub_code=self.text(row, 'project_sub_code'),
            project_full_code=self.text(row, 'project_full_code'),
            activity_name=self.text(row, 'activity_name'),
            zone=self.text(row, 'zone'),
            total_units=self.number(row, 'total_units', default=None),
            planned_units=self.number(row, 'planned_units', default=None),
            total_value=self.number(row, 'total_value', default=None),
            planned_value=self.number(row, 'planned_value', default=None),
            actual_units=self.number(row, 'actual_units'),
            activity_completed=self.flag(row, 'activity_completed'),
            activity_on_track=self.flag(row, 'activity_on_track'),
            activity_delayed=self.flag(row, 'activity_delayed'),
            delay_percentage=self.number(row, 'delay_percentage'),
            activity_progress_percentage=self.number(row, 'activity_progress_percentage'),
            deadline=self.day(row, 'deadline'),
        )

    def kpi(self, row: Mapping) -> KPIRecord:
        return KPIRecord(
            id=self.text(row, 'id') or None,
            project_code=self.text(row, 'project_code'),
            project_sub_code=self.text(row, 'project_sub_code'),
            project_full_code=self.text(row, 'project_full_code'),
            activity_name=self.text(row, 'activity_name'),
            zone=self.text(row, 'zone'),
            input_type=InputType.parse(self.field(row, 'input_type')),
            quantity=self.number(row, 'quantity'),
            planned_value=self.number(row, 'planned_value', default=None),
            actual_value=self.number(row, 'actual_value', default=None),
            value=self.number(row, 'value', default=None),
            status=KPIStatus.parse(self.field(row, 'kpi_status')),
            target_date=self.day(row, 'target_date'),
            actual_date=self.day(row, 'actual_date'),
        )


def project_from_row(row: Mapping, config: Optional[ProgressConfig] = None) -> Project:
    """Convert one raw project row into a Project."""
    return RowReader(config).project(row)


def activity_from_row(row: Mapping, config: Optional[ProgressConfig] = None) -> Activity:
    """Convert one raw BOQ row into an Activity."""
    return RowReader(config).activity(row)


def kpi_from_row(row: Mapping, config: Optional[ProgressConfig] = None) -> KPIRecord:
    """Convert one raw KPI row into a KPIRecord."""
    return RowReader(config).kpi(row)


# =============================================================================
# Snapshots
# =============================================================================

@dataclass(frozen=True)
class Snapshot:
    """Typed input collections for one engine run."""
    projects: tuple = ()
    activities: tuple = ()
    kpis: tuple = ()


def build_snapshot(
    projects: Iterable[Mapping] = (),
    activities: Iterable[Mapping] = (),
    kpis: Iterable[Mapping] = (),
    config: Optional[ProgressConfig] = None,
) -> Snapshot:
    """Convert raw row collections into a typed Snapshot."""
    reader = RowReader(config)
    snapshot = Snapshot(
        projects=tuple(reader.project(r) for r in projects),
        activities=tuple(reader.activity(r) for r in activities),
        kpis=tuple(reader.kpi(r) for r in kpis),
    )
    logger.debug(
        f"Snapshot: {len(snapshot.projects)} projects, {len(snapshot.activities)} activities, "
        f"{len(snapshot.kpis)} KPI records"
    )
    return snapshot


# =============================================================================
# DataFrame / CSV loaders
# =============================================================================

def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """DataFrame rows as dicts with NaN replaced by None."""
    if df.empty:
        return []
    return df.astype(object).where(pd.notna(df), None).to_dict('records')


def _require_columns(df: pd.DataFrame, fields: Sequence[str], source: str, config: ProgressConfig) -> None:
    aliases = [a for name in fields for a in config.get_field_aliases(name)]
    if not any(a in df.columns for a in aliases):
        raise IngestionError(source, f"none of the columns {aliases} present")


def load_csv(path: Union[str, Path]) -> pd.DataFrame:
    """
    Read a CSV export.

    Raises:
        IngestionError: If the file is missing, empty or unparseable
    """
    path = Path(path)
    try:
        return pd.read_csv(path, encoding='utf-8-sig', dtype=str, keep_default_na=True)
    except FileNotFoundError:
        raise IngestionError(str(path), "file not found")
    except pd.errors.EmptyDataError:
        raise IngestionError(str(path), "file is empty")
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise IngestionError(str(path), f"unparseable CSV: {e}")


def _load(
    path: Union[str, Path],
    convert: Callable[[RowReader, Mapping], Any],
    required: Sequence[str],
    config: Optional[ProgressConfig],
) -> List[Any]:
    config = config or get_config()
    df = load_csv(path)
    _require_columns(df, required, str(path), config)
    reader = RowReader(config)
    records = [convert(reader, row) for row in dataframe_to_rows(df)]
    logger.info(f"Loaded {len(records)} rows from {path}")
    return records


def load_projects_csv(path: Union[str, Path], config: Optional[ProgressConfig] = None) -> List[Project]:
    """Load projects from a CSV export."""
    return _load(path, RowReader.project, ("project_code",), config)


def load_activities_csv(path: Union[str, Path], config: Optional[ProgressConfig] = None) -> List[Activity]:
    """Load BOQ activities from a CSV export."""
    return _load(path, RowReader.activity, CODE_FIELDS, config)


def load_kpis_csv(path: Union[str, Path], config: Optional[ProgressConfig] = None) -> List[KPIRecord]:
    """Load KPI records from a CSV export."""
    return _load(path, RowReader.kpi, CODE_FIELDS, config)


def load_snapshot_csv(
    projects_path: Union[str, Path],
    activities_path: Optional[Union[str, Path]] = None,
    kpis_path: Optional[Union[str, Path]] = None,
    config: Optional[ProgressConfig] = None,
) -> Snapshot:
    """Load a Snapshot from up to three CSV exports."""
    return Snapshot(
        projects=tuple(load_projects_csv(projects_path, config)),
        activities=tuple(load_activities_csv(activities_path, config)) if activities_path else (),
        kpis=tuple(load_kpis_csv(kpis_path, config)) if kpis_path else (),
    )
