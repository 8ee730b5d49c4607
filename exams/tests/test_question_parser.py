"""
Tests for question file parsing and normalization.
"""
import json

from django.test import SimpleTestCase, override_settings

from exams.exceptions import (
    EmptyFile, EmptyQuestionList, EmptyQuestionText, InsufficientOptions,
    InvalidCorrectIndex, InvalidJson, MalformedHeader, TooManyRows, UnsupportedFormat,
)
from exams.services import QuestionFileParser, QuestionNormalizer


class QuestionFileParserTests(SimpleTestCase):
    """Tests for CSV/JSON parsing."""

    def test_json_array(self):
        content = json.dumps([
            {"questionText": "2 + 2 = ?", "options": ["3", "4"], "correctOptionIndex": 1}
        ]).encode()
        questions = QuestionFileParser.parse(content, 'bank.json', 'application/json')
        self.assertEqual(len(questions), 1)
        self.assertEqual(questions[0]['questionText'], '2 + 2 = ?')

    def test_json_object_with_questions_key(self):
        content = json.dumps({"questions": [{"questionText": "Q", "options": ["a", "b"]}]}).encode()
        questions = QuestionFileParser.parse(content, 'upload', 'application/json')
        self.assertEqual(len(questions), 1)

    def test_json_detected_before_csv(self):
        """A .json name wins even when the MIME type says CSV."""
        content = b'[{"questionText": "Q", "options": ["a", "b"], "correctOptionIndex": 0}]'
        questions = QuestionFileParser.parse(content, 'bank.json', 'text/csv')
        self.assertEqual(questions[0]['options'], ['a', 'b'])

    def test_invalid_json(self):
        with self.assertRaises(InvalidJson):
            QuestionFileParser.parse(b'{"questions": [', 'bank.json', '')

    def test_unsupported_format(self):
        with self.assertRaises(UnsupportedFormat):
            QuestionFileParser.parse(b'hello', 'bank.txt', 'text/plain')

    def test_blank_file(self):
        with self.assertRaises(EmptyFile):
            QuestionFileParser.parse(b'   \n  ', 'bank.csv', 'text/csv')

    def test_csv_basic(self):
        content = (
            "questionText,options,correctOptionIndex,explanation\r\n"
            "What is 2+2?,3|4|5,1,Basic addition\r\n"
        ).encode()
        questions = QuestionFileParser.parse(content, 'bank.csv', 'text/csv')
        self.assertEqual(questions, [{
            'questionText': 'What is 2+2?',
            'options': ['3', '4', '5'],
            'correctOptionIndex': '1',
            'explanation': 'Basic addition',
        }])

    def test_csv_header_case_insensitive_and_reordered(self):
        content = b"CorrectOptionIndex,QUESTIONTEXT,Options\n0,Capital of Bangladesh?,Dhaka|Khulna\n"
        questions = QuestionFileParser.parse(content, 'bank.csv', '')
        self.assertEqual(questions[0]['questionText'], 'Capital of Bangladesh?')
        self.assertEqual(questions[0]['correctOptionIndex'], '0')
        self.assertEqual(questions[0]['explanation'], '')

    def test_csv_quoted_commas_and_escaped_quotes(self):
        content = (
            'questionText,options,correctOptionIndex\n'
            '"Which is prime, 9 or 7?","9|7",1\n'
            '"Say ""hello""",a|b,0\n'
        ).encode()
        questions = QuestionFileParser.parse(content, 'bank.csv', '')
        self.assertEqual(questions[0]['questionText'], 'Which is prime, 9 or 7?')
        self.assertEqual(questions[1]['questionText'], 'Say "hello"')

    def test_csv_utf8_bom(self):
        content = '\ufeffquestionText,options,correctOptionIndex\nপ্রশ্ন,ক|খ,0\n'.encode('utf-8')
        questions = QuestionFileParser.parse(content, 'bank.csv', '')
        self.assertEqual(questions[0]['questionText'], 'প্রশ্ন')

    def test_csv_skips_blank_lines_and_blank_rows(self):
        content = b"questionText,options,correctOptionIndex\n\n , , \nQ1,a|b,0\n\n"
        questions = QuestionFileParser.parse(content, 'bank.csv', '')
        self.assertEqual(len(questions), 1)

    def test_csv_header_only(self):
        with self.assertRaises(EmptyFile):
            QuestionFileParser.parse(b"questionText,options,correctOptionIndex\n", 'bank.csv', '')

    def test_csv_missing_required_header(self):
        with self.assertRaises(MalformedHeader):
            QuestionFileParser.parse(b"questionText,options\nQ,a|b\n", 'bank.csv', '')

    def test_csv_short_row_fills_blanks(self):
        content = b"questionText,options,correctOptionIndex,explanation\nQ1,a|b\n"
        questions = QuestionFileParser.parse(content, 'bank.csv', '')
        self.assertEqual(questions[0]['correctOptionIndex'], '')


class QuestionNormalizerTests(SimpleTestCase):
    """Tests for question validation and canonical shape."""

    def test_normalizes_camel_case(self):
        question = QuestionNormalizer.normalize({
            'questionText': '  2 + 2 = ?  ',
            'options': [' 3 ', '4', ''],
            'correctOptionIndex': '1',
            'explanation': ' sum ',
        }, 1)
        self.assertEqual(question, {
            'question_text': '2 + 2 = ?',
            'options': ['3', '4'],
            'correct_option_index': 1,
            'explanation': 'sum',
        })

    def test_accepts_snake_case_and_delimited_options(self):
        question = QuestionNormalizer.normalize({
            'question_text': 'Q', 'options': 'a|b;c', 'correct_option_index': 2
        }, 1)
        self.assertEqual(question['options'], ['a', 'b', 'c'])
        self.assertEqual(question['correct_option_index'], 2)
        self.assertEqual(question['explanation'], '')

    def test_empty_text_reports_row(self):
        with self.assertRaises(EmptyQuestionText) as ctx:
            QuestionNormalizer.normalize_all([
                {'questionText': 'Q1', 'options': ['a', 'b'], 'correctOptionIndex': 0},
                {'questionText': '   ', 'options': ['a', 'b'], 'correctOptionIndex': 0},
            ])
        self.assertEqual(ctx.exception.row_number, 2)
        self.assertIn('Question 2', str(ctx.exception.detail))

    def test_insufficient_options(self):
        with self.assertRaises(InsufficientOptions):
            QuestionNormalizer.normalize({'questionText': 'Q', 'options': ['only', ' ']}, 1)

    def test_index_out_of_range(self):
        with self.assertRaises(InvalidCorrectIndex) as ctx:
            QuestionNormalizer.normalize({'questionText': 'Q', 'options': ['a', 'b'], 'correctOptionIndex': 2}, 3)
        self.assertIn('between 0 and 1', str(ctx.exception.detail))
        self.assertEqual(ctx.exception.row_number, 3)

    def test_index_rejects_non_integers(self):
        for value in [None, '', 'one', 1.5, True, -1]:
            with self.subTest(value=value):
                with self.assertRaises(InvalidCorrectIndex):
                    QuestionNormalizer.normalize(
                        {'questionText': 'Q', 'options': ['a', 'b'], 'correctOptionIndex': value}, 1
                    )

    def test_index_rejects_loose_integer_strings(self):
        options = [str(i) for i in range(12)]
        for value in ['1_0', '0x1', '1e1', '1.0', '+ 1', '\u0661']:
            with self.subTest(value=value):
                with self.assertRaises(InvalidCorrectIndex):
                    QuestionNormalizer.normalize({'questionText': 'Q', 'options': options, 'correctOptionIndex': value}, 1)

    def test_index_accepts_signed_and_padded_strings(self):
        for value, expected in [(' 3 ', 3), ('+1', 1), ('007', 7)]:
            with self.subTest(value=value):
                question = QuestionNormalizer.normalize(
                    {'questionText': 'Q', 'options': [str(i) for i in range(8)], 'correctOptionIndex': value}, 1
                )
                self.assertEqual(question['correct_option_index'], expected)

    def test_index_accepts_integral_float(self):
        question = QuestionNormalizer.normalize(
            {'questionText': 'Q', 'options': ['a', 'b'], 'correctOptionIndex': 1.0}, 1
        )
        self.assertEqual(question['correct_option_index'], 1)

    def test_empty_batch(self):
        for value in [[], None, {'questions': []}, 'text']:
            with self.subTest(value=value):
                with self.assertRaises(EmptyQuestionList):
                    QuestionNormalizer.normalize_all(value)

    def test_every_normalized_question_is_answerable(self):
        raw = QuestionFileParser.parse(
            b"questionText,options,correctOptionIndex\nA,x|y|z,2\nB,x|y,0\nC,p;q|r,1\n", 'bank.csv', ''
        )
        for question in QuestionNormalizer.normalize_all(raw):
            self.assertGreaterEqual(len(question['options']), 2)
            self.assertTrue(0 <= question['correct_option_index'] < len(question['options']))

    @override_settings(QUESTION_IMPORT={'MAX_ROWS': 2})
    def test_row_limit_from_settings(self):
        QuestionNormalizer.enforce_row_limit([{}, {}])
        with self.assertRaises(TooManyRows) as ctx:
            QuestionNormalizer.enforce_row_limit([{}, {}, {}])
        self.assertEqual(ctx.exception.limit, 2)
