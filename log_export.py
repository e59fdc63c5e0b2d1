"""Filtering and CSV export of parsed log records."""

from collections import Counter

CSV_HEADERS = ['Line #', 'Level', 'Message', 'Source']


def filter_records(records, search='', level=''):
    """Keep records matching the search text and the selected level.

    Search is a case-insensitive substring match against message and source.
    Level must match exactly. Empty values match everything.
    """
    term = (search or '').lower()
    result = []
    for record in records:
        if term and term not in record.message.lower() and term not in record.source.lower():
            continue
        if level and record.level != level:
            continue
        result.append(record)
    return result


def quote(value):
    """Wrap a field in double quotes, doubling any quotes inside it."""
    return '"' + value.replace('"', '""') + '"'


def records_to_csv(records):
    """Render records as CSV with message and source always quoted."""
    rows = [','.join(CSV_HEADERS)]
    for record in records:
        rows.append(','.join([
            str(record.line_number),
            record.level,
            quote(record.message),
            quote(record.source),
        ]))
    return '\n'.join(rows)


def export_filename(filename):
    name = filename or 'logs'
    if name.lower().endswith('.log'):
        name = name[:-4]
    return f'{name}_export.csv'


def level_counts(records):
    """Count records per level."""
    return dict(Counter(record.level for record in records))
