from django.test import SimpleTestCase

from exams.services import DuplicateAnalyzer
from exams.services.duplicates import EXISTING_EXAM, WITHIN_FILE, question_text_key


def q(text):
    return {'question_text': text, 'options': ['a', 'b'], 'correct_option_index': 0, 'explanation': ''}


class DuplicateAnalyzerTests(SimpleTestCase):
    """Tests for within-file and existing-exam duplicate detection."""

    def test_key_ignores_case_and_whitespace_runs(self):
        self.assertEqual(question_text_key('  What   is\tPython? '), 'what is python?')
        self.assertEqual(question_text_key('What is python?'), question_text_key('WHAT  IS  PYTHON?'))

    def test_case_and_whitespace_variants_are_duplicates_both_ways(self):
        forward = DuplicateAnalyzer.analyze([q('What is  DNA?'), q('what is dna?')])
        backward = DuplicateAnalyzer.analyze([q('what is dna?'), q('What is  DNA?')])
        self.assertEqual(forward.duplicate_indexes, {1})
        self.assertEqual(backward.duplicate_indexes, {1})

    def test_first_occurrence_is_kept(self):
        analysis = DuplicateAnalyzer.analyze([q('A'), q('B'), q('a'), q('A ')])
        self.assertEqual(analysis.duplicate_indexes, {2, 3})
        self.assertEqual(analysis.duplicate_within_file_count, 2)
        self.assertEqual(analysis.duplicate_rows[0], {
            'row_number': 3,
            'question_text': 'a',
            'reasons': [WITHIN_FILE],
            'first_row_number': 1,
        })

    def test_existing_questions_in_append_mode(self):
        analysis = DuplicateAnalyzer.analyze(
            [q('Existing question'), q('New Q'), q('New Q')],
            existing_questions=['existing   QUESTION'],
            mode='append'
        )
        self.assertEqual(analysis.duplicate_indexes, {0, 2})
        self.assertEqual(analysis.duplicate_within_file_count, 1)
        self.assertEqual(analysis.duplicate_existing_count, 1)
        self.assertEqual(analysis.importable_count(3), 1)
        self.assertEqual(analysis.duplicate_rows[0]['reasons'], [EXISTING_EXAM])

    def test_replace_mode_ignores_existing_questions(self):
        analysis = DuplicateAnalyzer.analyze([q('Existing question')], ['Existing question'], mode='replace')
        self.assertEqual(analysis.duplicate_indexes, set())
        self.assertEqual(analysis.duplicate_existing_count, 0)

    def test_row_with_both_reasons_counts_once_per_reason(self):
        analysis = DuplicateAnalyzer.analyze([q('Old'), q('old')], [{'question_text': 'OLD'}])
        self.assertEqual(analysis.duplicate_indexes, {0, 1})
        self.assertEqual(analysis.duplicate_existing_count, 2)
        self.assertEqual(analysis.duplicate_within_file_count, 1)
        self.assertEqual(analysis.duplicate_rows[1]['reasons'], [WITHIN_FILE, EXISTING_EXAM])
        self.assertEqual(analysis.duplicate_row_count, 2)

    def test_no_duplicates(self):
        analysis = DuplicateAnalyzer.analyze([q('A'), q('B')], ['C'])
        self.assertEqual(analysis.duplicate_rows, [])
        self.assertEqual(analysis.importable_count(2), 2)
