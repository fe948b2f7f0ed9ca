import datetime as dt
import io
import numbers
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import pandas as pd
import yaml

from social_listening.core.config import get_settings
from social_listening.core.errors import IngestionError
from social_listening.core.logging import get_logger
from social_listening.models.mention import Mention, to_calendar_date

logger = get_logger(__name__)

# Spreadsheet day 0; serial 25569 is 1970-01-01
SERIAL_EPOCH = dt.datetime(1899, 12, 30)
MAX_SERIAL = 2958465  # 9999-12-31

SUPPORTED_EXTENSIONS = (".xlsx", ".xls", ".csv")

MENTION_FIELDS = (
    "url", "date", "content", "sentiment", "channel", "content_type", "total_engagement",
    "username", "category", "sub_category", "type_of_speaker", "comments", "reactions", "shares",
)


def normalize_header(header: Any) -> str:
    """Lower-case a header and treat runs of spaces/underscores as one underscore."""
    return re.sub(r"[\s_]+", "_", str(header).strip().lower())


def load_column_config() -> Dict[str, Any]:
    """Load header aliases and required columns from YAML."""
    config_path = Path(__file__).parent.parent.parent / "config" / "columns.yaml"

    try:
        with open(config_path, 'r') as file:
            return yaml.safe_load(file) or {}
    except Exception as e:
        logger.error(f"Failed to load column config: {e}")
        return {}


def serial_to_date(value: float) -> Optional[dt.date]:
    """Convert a spreadsheet day serial to a calendar date."""
    if not 0 < value <= MAX_SERIAL:
        return None
    return (SERIAL_EPOCH + dt.timedelta(days=float(value))).date()


class MentionImporter:
    """Turns spreadsheet rows with loosely named columns into validated mentions."""

    def __init__(
        self,
        column_config: Optional[Dict[str, Any]] = None,
        max_upload_bytes: Optional[int] = None,
        today: Optional[dt.date] = None
    ):
        config = column_config if column_config is not None else load_column_config()
        self.max_upload_bytes = max_upload_bytes or get_settings().MAX_UPLOAD_BYTES
        self.today = today
        self.required = list(config.get("required", []))

        self.lookup: Dict[str, str] = {}
        aliases = config.get("columns", {})
        for field in MENTION_FIELDS:
            for name in [field, *aliases.get(field, [])]:
                self.lookup.setdefault(normalize_header(name), field)

    def resolve_headers(self, headers: Iterable[Any]) -> Dict[str, str]:
        """Map raw headers to Mention fields. The first header for a field wins."""
        resolved = {}
        taken = set()
        for header in headers:
            field = self.lookup.get(normalize_header(header))
            if field and field not in taken:
                resolved[header] = field
                taken.add(field)
        return resolved

    def missing_columns(self, headers: Iterable[Any]) -> List[str]:
        present = set(self.resolve_headers(headers).values())
        return [column for column in self.required if column not in present]

    def parse_date(self, value: Any) -> dt.date:
        """
        Read a date cell.

        Accepts dates, timestamps, ISO strings and day serials. Anything
        unusable falls back to the ingestion date.
        """
        if isinstance(value, numbers.Real) and not isinstance(value, bool):
            parsed = None if pd.isna(value) else serial_to_date(value)
        elif isinstance(value, str) and re.fullmatch(r"\d+(\.\d+)?", value.strip()):
            parsed = serial_to_date(float(value))
        else:
            parsed = to_calendar_date(value)

        if parsed is None:
            if value not in (None, ""):
                logger.warning(f"Unparseable date {value!r}, using ingestion date")
            parsed = self.today or dt.date.today()
        return parsed

    def normalize_row(self, row: Dict[str, Any], index: int, headers: Optional[Dict[str, str]] = None) -> Mention:
        """Build a Mention from one raw row. Ids are 1-based row positions."""
        headers = headers if headers is not None else self.resolve_headers(row.keys())
        values = {field: row.get(header) for header, field in headers.items()}
        values["id"] = index + 1
        values["date"] = self.parse_date(values.get("date"))
        return Mention(**values)

    def normalize_rows(self, rows: List[Dict[str, Any]]) -> List[Mention]:
        rows = [row for row in rows if any(value not in (None, "") for value in row.values())]
        if not rows:
            raise IngestionError("file has no valid data rows")

        headers = self.resolve_headers(rows[0].keys())
        mentions = [self.normalize_row(row, index, headers) for index, row in enumerate(rows)]
        logger.info(f"Normalized {len(mentions)} rows ({len(headers)} recognised columns)")
        return mentions

    def read_csv(self, text: str) -> List[Dict[str, Any]]:
        try:
            frame = pd.read_csv(io.StringIO(text), skip_blank_lines=True)
        except pd.errors.EmptyDataError:
            return []
        except Exception as e:
            logger.error(f"CSV parse error: {e}")
            raise IngestionError(f"Failed to parse CSV: {e}") from e
        return _frame_rows(frame)

    def read_excel(self, data: bytes) -> List[Dict[str, Any]]:
        """Rows of the first worksheet."""
        try:
            frame = pd.read_excel(io.BytesIO(data), sheet_name=0)
        except Exception as e:
            logger.error(f"Excel parse error: {e}")
            raise IngestionError(f"Failed to parse Excel file: {e}") from e
        return _frame_rows(frame)

    def validate_upload(self, filename: str, size: int) -> None:
        if not filename.lower().endswith(SUPPORTED_EXTENSIONS):
            raise IngestionError("Please upload an Excel or CSV file (.xlsx, .xls or .csv)")
        if size > self.max_upload_bytes:
            limit_mb = self.max_upload_bytes // (1024 * 1024)
            raise IngestionError(f"File size must be less than {limit_mb}MB")

    def load_bytes(self, filename: str, data: bytes, require_columns: bool = True) -> List[Mention]:
        """Validate and parse an uploaded spreadsheet."""
        self.validate_upload(filename, len(data))

        if filename.lower().endswith(".csv"):
            try:
                text = data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise IngestionError(f"CSV file is not valid UTF-8: {e}") from e
            rows = self.read_csv(text)
        else:
            rows = self.read_excel(data)

        if not rows:
            raise IngestionError("file has no valid data rows")

        if require_columns:
            missing = self.missing_columns(rows[0].keys())
            if missing:
                raise IngestionError(f"Missing required columns: {', '.join(missing)}")

        return self.normalize_rows(rows)

    def load_file(self, path: Path) -> List[Mention]:
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise IngestionError(f"Cannot read {path}: {e}") from e

        logger.info(f"Importing {path.name} ({len(data)} bytes)")
        return self.load_bytes(path.name, data)

    def load_csv_text(self, text: str) -> List[Mention]:
        """Parse CSV text without requiring the full column set."""
        return self.normalize_rows(self.read_csv(text))


def _frame_rows(frame: pd.DataFrame) -> List[Dict[str, Any]]:
    frame = frame.dropna(how="all")
    frame.columns = [str(column).strip() for column in frame.columns]
    frame = frame.astype(object).where(frame.notna(), None)
    return frame.to_dict(orient="records")
