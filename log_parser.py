"""Log line parsing utilities."""

import logging
import re
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

DEFAULT_LEVEL = 'INFO'

# Bare words only count as a level when they are a known severity.
# Anything inside brackets in level position is taken as-is.
SEVERITIES = r'ERROR|WARN(?:ING)?|INFO|DEBUG|SUCCESS|TRACE|FATAL|CRITICAL|NOTICE'
LEVEL = (
    r'(?:\[(?P<bracket_level>\w+)\]|(?P<bare_level>' + SEVERITIES + r')\b:?)?'
)

# Ordered: the first pattern that matches wins.
# "2023-12-27T10:30:45.123Z [INFO] Message"
# "2023-12-27 10:30:45 [INFO] Message"
# "1703679045 [INFO] Message"
# "[INFO] Message"
LINE_PATTERNS = [
    ('iso', re.compile(
        r'^(?P<timestamp>\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(?:\.\d{3})?Z?)(?![\w.])'
        r'\s*' + LEVEL + r'\s*(?P<message>.*)$'
    )),
    ('datetime', re.compile(
        r'^(?P<timestamp>\d{4}-\d{2}-\d{2}\s+\d{2}:\d{2}:\d{2}(?:\.\d{3})?)(?![\w.])'
        r'\s*' + LEVEL + r'\s*(?P<message>.*)$'
    )),
    ('epoch', re.compile(
        r'^(?P<timestamp>\d{10,13})(?!\w)'
        r'\s*' + LEVEL + r'\s*(?P<message>.*)$'
    )),
    ('level', re.compile(
        r'^' + LEVEL + r'\s*(?P<message>.*)$'
    )),
]

SOURCE_PATTERNS = [
    re.compile(r'\[([^\]]+)\]'),
    re.compile(r'\(([^)]+)\)'),
    re.compile(r'from\s+(\S+)', re.IGNORECASE),
    re.compile(r'at\s+(\S+)', re.IGNORECASE),
]


@dataclass(frozen=True)
class LogRecord:
    """One parsed log line."""

    line_number: int
    timestamp: str
    level: str
    message: str
    source: str
    raw: str

    def to_dict(self):
        """Wire representation consumed by the browser viewer."""
        data = asdict(self)
        data['lineNumber'] = data.pop('line_number')
        return data

    @classmethod
    def from_dict(cls, data):
        return cls(
            line_number=int(data.get('lineNumber', 0)),
            timestamp=str(data.get('timestamp') or ''),
            level=str(data.get('level') or DEFAULT_LEVEL),
            message=str(data.get('message') or ''),
            source=str(data.get('source') or ''),
            raw=str(data.get('raw') or ''),
        )


def fallback_record(line, line_number):
    """Record for a line nothing could be extracted from."""
    return LogRecord(
        line_number=line_number,
        timestamp='',
        level=DEFAULT_LEVEL,
        message=line,
        source='',
        raw=line,
    )


def extract_source(line):
    """Best-effort component name from anywhere in the line."""
    for pattern in SOURCE_PATTERNS:
        match = pattern.search(line)
        if match:
            return match.group(1)
    return ''


def classify_line(line, line_number):
    """Parse a single log line into a LogRecord."""
    source = extract_source(line)
    for _name, pattern in LINE_PATTERNS:
        match = pattern.match(line)
        if not match:
            continue
        fields = match.groupdict()
        level = fields['bracket_level'] or fields['bare_level']
        message = fields['message']
        return LogRecord(
            line_number=line_number,
            timestamp=fields.get('timestamp') or '',
            level=level or DEFAULT_LEVEL,
            message=message if message.strip() else line,
            source=source,
            raw=line,
        )
    return LogRecord(
        line_number=line_number,
        timestamp='',
        level=DEFAULT_LEVEL,
        message=line,
        source=source,
        raw=line,
    )


def split_lines(content):
    """Non-blank lines of content, with any CRLF carriage return removed."""
    lines = []
    for line in content.split('\n'):
        if line.endswith('\r'):
            line = line[:-1]
        if line.strip():
            lines.append(line)
    return lines


def parse_log_content(content):
    """Parse file content into an ordered list of LogRecords.

    Blank lines are dropped before numbering, so line numbers count only the
    lines that produced a record. Never raises: unreadable content gives an
    empty list.
    """
    try:
        lines = split_lines(content)
    except Exception:
        logger.exception('Could not split log content')
        return []

    records = []
    for index, line in enumerate(lines, start=1):
        try:
            records.append(classify_line(line, index))
        except Exception:
            logger.exception('Could not classify line %d', index)
            records.append(fallback_record(line, index))
    return records
