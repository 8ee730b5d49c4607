"""
Tests for upload preview stores (TTL, ownership and eviction).
"""
from datetime import timedelta
from unittest import mock

from django.core.cache import caches
from django.test import SimpleTestCase
from django.utils import timezone

from exams.exceptions import PreviewForbidden, PreviewNotFound
from exams.previews import CachePreviewStore, InMemoryPreviewStore, get_preview_store
from exams.services import DuplicateAnalyzer

QUESTIONS = [
    {'question_text': 'Q1', 'options': ['a', 'b'], 'correct_option_index': 0, 'explanation': ''},
    {'question_text': 'q1', 'options': ['a', 'b'], 'correct_option_index': 1, 'explanation': ''},
]


def create_preview(store, admin_id=1):
    return store.create(
        questions=QUESTIONS,
        analysis=DuplicateAnalyzer.analyze(QUESTIONS),
        exam_id=7,
        exam_title='Model Test',
        file_name='bank.csv',
        mode='append',
        admin_id=admin_id
    )


class InMemoryPreviewStoreTests(SimpleTestCase):

    def setUp(self):
        self.store = InMemoryPreviewStore(ttl_minutes=15)

    def test_create_and_get(self):
        preview = create_preview(self.store)
        self.assertEqual(preview.expires_at - preview.created_at, timedelta(minutes=15))
        self.assertEqual(preview.duplicate_indexes, [1])
        self.assertEqual(preview.total_rows, 2)
        self.assertEqual(preview.importable_count, 1)

        loaded = self.store.get(preview.preview_id, 1)
        self.assertIs(loaded, preview)

    def test_ids_are_unique(self):
        first = create_preview(self.store)
        second = create_preview(self.store)
        self.assertNotEqual(first.preview_id, second.preview_id)
        self.assertEqual(len(self.store), 2)

    def test_unknown_id(self):
        with self.assertRaises(PreviewNotFound):
            self.store.get('missing', 1)

    def test_expired_preview_is_not_found(self):
        preview = create_preview(self.store)
        later = timezone.now() + timedelta(minutes=15, seconds=1)
        with mock.patch('django.utils.timezone.now', return_value=later):
            with self.assertRaises(PreviewNotFound):
                self.store.get(preview.preview_id, 1)
        self.assertEqual(len(self.store), 0)

    def test_other_admin_is_forbidden_and_preview_survives(self):
        preview = create_preview(self.store, admin_id=1)
        with self.assertRaises(PreviewForbidden):
            self.store.get(preview.preview_id, 2)
        self.assertEqual(self.store.get(preview.preview_id, '1').preview_id, preview.preview_id)

    def test_lazy_sweep_on_create(self):
        old = create_preview(self.store)
        later = timezone.now() + timedelta(minutes=20)
        with mock.patch('django.utils.timezone.now', return_value=later):
            create_preview(self.store)
        self.assertEqual(len(self.store), 1)
        self.assertIsNone(self.store._load(old.preview_id))

    def test_take_removes_entry(self):
        preview = create_preview(self.store)
        self.assertIs(self.store.take(preview.preview_id, 1), preview)
        self.assertEqual(len(self.store), 0)
        with self.assertRaises(PreviewNotFound):
            self.store.take(preview.preview_id, 1)

        self.store.put_back(preview)
        self.assertEqual(len(self.store), 1)

    def test_take_by_other_admin_leaves_entry(self):
        preview = create_preview(self.store, admin_id=1)
        with self.assertRaises(PreviewForbidden):
            self.store.take(preview.preview_id, 2)
        self.assertEqual(len(self.store), 1)

    def test_active_eviction(self):
        preview = create_preview(self.store)
        self.assertTrue(self.store.delete(preview.preview_id))
        self.assertFalse(self.store.delete(preview.preview_id))

        create_preview(self.store)
        later = timezone.now() + timedelta(hours=1)
        with mock.patch('django.utils.timezone.now', return_value=later):
            self.assertEqual(self.store.sweep_expired(), 1)


class CachePreviewStoreTests(SimpleTestCase):

    def setUp(self):
        caches['default'].clear()
        self.store = CachePreviewStore(ttl_minutes=15, cache_alias='default')

    def test_round_trip_through_cache(self):
        preview = create_preview(self.store)
        loaded = self.store.get(preview.preview_id, 1)
        self.assertEqual(loaded.questions, QUESTIONS)
        self.assertEqual(loaded.exam_title, 'Model Test')

    def test_ownership(self):
        preview = create_preview(self.store, admin_id=1)
        with self.assertRaises(PreviewForbidden):
            self.store.get(preview.preview_id, 99)

    def test_delete(self):
        preview = create_preview(self.store)
        self.store.delete(preview.preview_id)
        with self.assertRaises(PreviewNotFound):
            self.store.get(preview.preview_id, 1)

    def test_take_claims_once(self):
        preview = create_preview(self.store)
        with self.assertRaises(PreviewForbidden):
            self.store.take(preview.preview_id, 99)

        taken = self.store.take(preview.preview_id, 1)
        self.assertEqual(taken.preview_id, preview.preview_id)
        with self.assertRaises(PreviewNotFound):
            self.store.take(preview.preview_id, 1)

        self.store.put_back(taken)
        self.assertEqual(self.store.take(preview.preview_id, 1).questions, QUESTIONS)

    def test_held_claim_blocks_take(self):
        preview = create_preview(self.store)
        self.store.cache.add(self.store._claim_key(preview.preview_id), True)
        self.assertIsNone(self.store._pop(preview.preview_id))
        self.assertEqual(self.store.get(preview.preview_id, 1).preview_id, preview.preview_id)

    def test_expired_entry_still_in_cache_is_not_found(self):
        preview = create_preview(self.store)
        later = timezone.now() + timedelta(minutes=16)
        with mock.patch('django.utils.timezone.now', return_value=later):
            with self.assertRaises(PreviewNotFound):
                self.store.get(preview.preview_id, 1)


class PreviewStoreFactoryTests(SimpleTestCase):

    def test_singleton_per_backend(self):
        self.assertIs(get_preview_store('memory'), get_preview_store('memory'))
        self.assertIsInstance(get_preview_store('memory'), InMemoryPreviewStore)
        self.assertIsInstance(get_preview_store('cache'), CachePreviewStore)
