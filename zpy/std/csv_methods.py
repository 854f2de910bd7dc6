"""`csv_parse` and `csv_stringify`.

With a header row, `csv_parse` returns a List of Mappings keyed by column
name; without one it returns a List of Lists. All fields are Strings.
"""

import csv
import io
from typing import Any, List

from zpy.builtin_function import BuiltinRegistry
from zpy.errors import BuiltinFailure
from zpy.types import ListVal, MapVal, to_string, type_name
from .checks import expect_kind


def delimiter_arg(name: str, args: List[Any], index: int) -> str:
    if len(args) <= index:
        return ','
    delimiter = expect_kind(name, 'delimiter', args[index], 'String')
    if len(delimiter) != 1:
        raise BuiltinFailure(f"{name} delimiter must be a single character")
    return delimiter


def register_csv(registry: BuiltinRegistry):

    def csv_parse(args: List[Any]) -> Any:
        text = expect_kind('csv_parse', 'argument', args[0], 'String')
        delimiter = delimiter_arg('csv_parse', args, 1)
        has_header = expect_kind('csv_parse', 'has_header', args[2], 'Boolean') if len(args) > 2 else True
        try:
            rows = [row for row in csv.reader(io.StringIO(text), delimiter=delimiter) if row]
        except csv.Error as e:
            raise BuiltinFailure(f"invalid CSV: {e}") from None
        if not has_header:
            return ListVal([ListVal(row) for row in rows])
        if not rows:
            return ListVal()
        header, body = rows[0], rows[1:]
        records = []
        for row in body:
            records.append(MapVal([(column, row[i] if i < len(row) else '') for i, column in enumerate(header)]))
        return ListVal(records)

    def csv_stringify(args: List[Any]) -> Any:
        data = expect_kind('csv_stringify', 'argument', args[0], 'List')
        delimiter = delimiter_arg('csv_stringify', args, 1)
        out = io.StringIO()
        writer = csv.writer(out, delimiter=delimiter, lineterminator='\n')
        if data.items and isinstance(data.items[0], MapVal):
            header = data.items[0].keys()
            writer.writerow([to_string(column) for column in header])
            for record in data.items:
                if not isinstance(record, MapVal):
                    raise BuiltinFailure(f"csv_stringify rows must all be Mappings, found {type_name(record)}")
                writer.writerow([to_string(record.get(column, '')) for column in header])
            return out.getvalue()
        for row in data.items:
            if not isinstance(row, ListVal):
                raise BuiltinFailure(f"csv_stringify rows must be Lists or Mappings, found {type_name(row)}")
            writer.writerow([to_string(field) for field in row.items])
        return out.getvalue()

    registry.register('csv_parse', 1, csv_parse, max_arity=3)
    registry.register('csv_stringify', 1, csv_stringify, max_arity=2)
