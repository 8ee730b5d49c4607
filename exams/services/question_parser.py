"""
Question file parsing for CSV/JSON uploads.

Produces raw question records; validation and canonical shape are the
normalizer's job.
"""
import csv
import json

from exams.exceptions import EmptyFile, InvalidJson, MalformedHeader, UnsupportedFormat

JSON = 'json'
CSV = 'csv'


class QuestionFileParser:
    REQUIRED_COLUMNS = ['questiontext', 'options', 'correctoptionindex']
    OPTIONAL_COLUMNS = ['explanation']
    OPTION_DELIMITER = '|'

    @classmethod
    def parse(cls, content, file_name='', mime_type=''):
        """
        Parse uploaded bytes into a list of raw question dicts.
        JSON is detected before CSV, by extension or MIME type.
        """
        text = cls._decode(content)
        if not text.strip():
            raise EmptyFile()

        file_format = cls.detect_format(file_name, mime_type)
        if file_format == JSON:
            return cls.parse_json(text)
        return cls.parse_csv(text)

    @staticmethod
    def detect_format(file_name, mime_type):
        name = (file_name or '').lower()
        content_type = (mime_type or '').lower()

        if name.endswith('.json') or 'application/json' in content_type or 'text/json' in content_type:
            return JSON
        if name.endswith('.csv') or 'text/csv' in content_type:
            return CSV
        raise UnsupportedFormat()

    @staticmethod
    def _decode(content):
        if isinstance(content, str):
            return content
        return content.decode('utf-8-sig', errors='replace')

    @staticmethod
    def parse_json(text):
        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as e:
            raise InvalidJson(f"Invalid JSON file: {e.msg} (line {e.lineno})")

        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, dict):
            return parsed.get('questions')
        return None

    @classmethod
    def parse_csv(cls, text):
        lines = [line.strip() for line in text.replace('\r', '').split('\n')]
        lines = [line for line in lines if line]
        if len(lines) < 2:
            raise EmptyFile('CSV must include a header row and at least one data row')

        rows = [cls.split_line(line) for line in lines]
        columns = cls._locate_columns(rows[0])

        questions = []
        for row in rows[1:]:
            if all(value == '' for value in row):
                continue
            questions.append({
                'questionText': cls._cell(row, columns['questiontext']),
                'options': [
                    option.strip()
                    for option in cls._cell(row, columns['options']).split(cls.OPTION_DELIMITER)
                    if option.strip()
                ],
                'correctOptionIndex': cls._cell(row, columns['correctoptionindex']),
                'explanation': cls._cell(row, columns.get('explanation')),
            })
        return questions

    @staticmethod
    def split_line(line):
        """Quote-aware split of one CSV line; quoted commas and "" escapes are kept."""
        row = next(csv.reader([line], skipinitialspace=True), [])
        return [value.strip() for value in row]

    @classmethod
    def _locate_columns(cls, header):
        normalized = [column.lower() for column in header]
        columns = {}
        for name in cls.REQUIRED_COLUMNS + cls.OPTIONAL_COLUMNS:
            if name in normalized:
                columns[name] = normalized.index(name)

        if any(name not in columns for name in cls.REQUIRED_COLUMNS):
            raise MalformedHeader()
        return columns

    @staticmethod
    def _cell(row, index):
        if index is None or index >= len(row):
            return ''
        return row[index]
