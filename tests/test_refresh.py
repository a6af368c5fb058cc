"""Tests for PocketPulse.core.refresh.

The gateway functions are patched. Most tests run the refresh manager
synchronously so every cycle is deterministic; AsyncRefreshTest drives the
worker threads and waits on the event loop.
"""
import threading
import time
import unittest
from unittest.mock import patch

from PocketPulse.core import refresh
from PocketPulse.core import service
from PocketPulse.data.data import Summary, Transaction, add_days, today_iso
from PocketPulse.status import status
from PocketPulse.ui.actions import signals
from tests.base import BaseTestCase, close_manager, summary_record, transaction_records, wait_until


class RefreshTestCase(BaseTestCase):
    def setUp(self) -> None:
        super().setUp()

        self.transactions = [Transaction.from_dict(r) for r in transaction_records()]
        self.summary = Summary.from_dict(summary_record())

        self.list_patch = patch.object(service, 'list_transactions', return_value=list(self.transactions))
        self.summary_patch = patch.object(service, 'fetch_summary', return_value=self.summary)
        self.create_patch = patch.object(service, 'create_transaction')
        self.delete_patch = patch.object(service, 'delete_transaction')

        self.list_mock = self.list_patch.start()
        self.summary_mock = self.summary_patch.start()
        self.create_mock = self.create_patch.start()
        self.delete_mock = self.delete_patch.start()

        self.manager = refresh.RefreshManager(asynchronous=False)

        self.emitted = {'rows': [], 'summary': [], 'series': [], 'created': []}
        signals.transactionsChanged.connect(self._on_rows)
        signals.summaryChanged.connect(self._on_summary)
        signals.seriesChanged.connect(self._on_series)
        signals.transactionCreated.connect(self._on_created)

    def tearDown(self) -> None:
        signals.transactionsChanged.disconnect(self._on_rows)
        signals.summaryChanged.disconnect(self._on_summary)
        signals.seriesChanged.disconnect(self._on_series)
        signals.transactionCreated.disconnect(self._on_created)

        self.manager.close()
        self.manager.deleteLater()
        self.manager = None

        patch.stopall()
        super().tearDown()

    def _on_rows(self, rows):
        self.emitted['rows'].append(rows)

    def _on_summary(self, summary):
        self.emitted['summary'].append(summary)

    def _on_series(self, series):
        self.emitted['series'].append(series)

    def _on_created(self, transaction):
        self.emitted['created'].append(transaction)


class RefreshCycleTest(RefreshTestCase):
    def test_default_state(self):
        state = self.manager.state
        self.assertEqual(state.view_date, today_iso())
        self.assertEqual(state.type_filter, 'all')
        self.assertEqual(state.query, '')

    def test_run_cycle_fetches_and_transforms(self):
        state = refresh.ViewState(view_date='2024-05-10', type_filter='expense', query='')
        result = refresh.run_cycle(3, state)

        self.assertEqual(result.token, 3)
        self.assertEqual([t.id for t in result.rows], [2, 3])
        self.assertEqual(len(result.transactions), 4)
        self.assertEqual(result.summary, self.summary)
        self.assertEqual(result.series.labels[-1], '2024-05-10')
        self.assertEqual(result.series.income[-1], 5000.0)
        self.assertEqual(result.series.expense[-2], 200.0)
        self.summary_mock.assert_called_once_with('2024-05-10')

    def test_refresh_publishes_results(self):
        self.manager.set_view_date('2024-05-10')
        token = self.manager.refresh()

        self.assertEqual(token, self.manager.token)
        self.assertEqual([t.id for t in self.emitted['rows'][-1]], [2, 1, 3, 4])
        self.assertEqual(self.emitted['summary'][-1], self.summary)
        self.assertEqual(self.emitted['series'][-1].labels[-1], '2024-05-10')

    def test_each_refresh_issues_a_new_token(self):
        first = self.manager.refresh()
        second = self.manager.refresh()
        self.assertGreater(second, first)

    def test_stale_result_is_discarded(self):
        stale = refresh.run_cycle(self.manager.token, self.manager.state)
        self.manager.refresh()

        discarded = []
        self.manager.refreshDiscarded.connect(discarded.append)
        count = len(self.emitted['rows'])

        self.assertFalse(self.manager.deliver(stale))
        self.assertEqual(len(self.emitted['rows']), count)
        self.assertEqual(discarded, [stale.token])

    def test_latest_result_is_applied(self):
        self.manager.refresh()
        latest = refresh.run_cycle(self.manager.token, self.manager.state)
        self.assertTrue(self.manager.deliver(latest))

    def test_refresh_requested_signal_refreshes(self):
        token = self.manager.token
        signals.refreshRequested.emit()
        self.assertEqual(self.manager.token, token + 1)


class ViewStateTest(RefreshTestCase):
    def test_set_type_filter_rejects_invalid(self):
        with self.assertRaises(ValueError):
            self.manager.set_type_filter('transfer')
        self.assertEqual(self.manager.state.type_filter, 'all')

    def test_state_changes_schedule_one_refresh(self):
        with patch.object(self.manager, 'request_refresh') as request_refresh:
            self.manager.set_type_filter('income')
            self.manager.set_query('sal')
            self.manager.set_view_date('2024-05-10')

        self.assertEqual(request_refresh.call_count, 3)
        self.assertEqual(self.manager.state, refresh.ViewState('2024-05-10', 'income', 'sal'))

    def test_unchanged_state_does_not_refresh(self):
        with patch.object(self.manager, 'request_refresh') as request_refresh:
            self.manager.set_type_filter('all')
            self.manager.set_query('')
            self.manager.set_view_date(self.manager.state.view_date)
        request_refresh.assert_not_called()

    def test_debounced_changes_refresh_with_latest_state(self):
        self.manager.set_query('s')
        self.manager.set_query('sa')
        self.manager.set_query('salary')

        token = self.manager.token
        self.assertTrue(self.manager._refresh_timer.isActive())
        self.assertEqual(self.manager.token, token)

        self.manager.refresh()
        self.assertFalse(self.manager._refresh_timer.isActive())
        self.assertEqual(self.manager.token, token + 1)
        self.assertEqual([t.id for t in self.emitted['rows'][-1]], [1])

    def test_filters_apply_to_rows(self):
        self.manager.set_type_filter('income')
        self.manager.refresh()
        self.assertEqual([t.id for t in self.emitted['rows'][-1]], [1, 4])


class SubmitTransactionTest(RefreshTestCase):
    def test_invalid_amount_never_reaches_server(self):
        for amount in ('0', '-5', 'abc', ''):
            with self.subTest(amount=amount):
                with self.assertRaises(status.AmountInvalidException):
                    self.manager.submit_transaction('expense', amount)
        self.create_mock.assert_not_called()

    def test_created_transaction_triggers_refresh(self):
        created = Transaction(5, 'expense', 42.0, 'Expense', '2024-05-10', '')
        self.create_mock.return_value = created
        token = self.manager.token

        result = self.manager.submit_transaction('expense', '42', date='2024-05-10')

        self.assertEqual(result, created)
        self.assertEqual(self.emitted['created'], [created])
        self.assertEqual(self.manager.token, token + 1)
        self.create_mock.assert_called_once_with({
            'type': 'expense',
            'amount': 42.0,
            'category': 'Expense',
            'date': '2024-05-10',
            'description': '',
        })

    def test_failed_create_returns_none_without_refresh(self):
        self.create_mock.return_value = None
        token = self.manager.token

        self.assertIsNone(self.manager.submit_transaction('income', 10))
        self.assertEqual(self.manager.token, token)
        self.assertEqual(self.emitted['created'], [])


class DeleteTransactionTest(RefreshTestCase):
    def test_acknowledged_delete_refreshes(self):
        self.delete_mock.return_value = {'ok': True}
        token = self.manager.token

        self.assertTrue(self.manager.delete_transaction(3))
        self.delete_mock.assert_called_once_with(3)
        self.assertEqual(self.manager.token, token + 1)

    def test_failed_delete_returns_false(self):
        self.delete_mock.return_value = None
        token = self.manager.token

        self.assertFalse(self.manager.delete_transaction(3))
        self.assertEqual(self.manager.token, token)


class SeedDemoDataTest(RefreshTestCase):
    def test_seeds_relative_to_today(self):
        self.create_mock.side_effect = lambda draft: Transaction(1, **draft)

        self.assertEqual(self.manager.seed_demo_data(), len(refresh.DEMO_DATA))

        dates = [c.args[0]['date'] for c in self.create_mock.call_args_list]
        today = today_iso()
        self.assertEqual(dates, [today, today, today, add_days(today, -1), add_days(today, -2)])
        self.assertTrue(all('id' not in c.args[0] for c in self.create_mock.call_args_list))

    def test_counts_only_accepted(self):
        self.create_mock.side_effect = [Transaction(1, 'income', 1.0, 'Income', today_iso()), None, None, None, None]
        token = self.manager.token

        self.assertEqual(self.manager.seed_demo_data(), 1)
        self.assertEqual(self.manager.token, token + 1)


class CloseTest(RefreshTestCase):
    def test_closed_manager_ignores_application_signals(self):
        self.manager.close()
        token = self.manager.token

        signals.refreshRequested.emit()
        signals.seedDemoRequested.emit()
        signals.searchTextChanged.emit('salary')

        self.assertEqual(self.manager.token, token)
        self.assertEqual(self.manager.state.query, '')
        self.create_mock.assert_not_called()

    def test_only_the_open_manager_answers_seed_requests(self):
        self.create_mock.return_value = None
        self.manager.close()
        other = refresh.RefreshManager(asynchronous=False)
        try:
            signals.seedDemoRequested.emit()
        finally:
            other.close()
        self.assertEqual(self.create_mock.call_count, len(refresh.DEMO_DATA))

    def test_close_cancels_pending_refresh(self):
        self.manager.set_query('sal')
        self.assertTrue(self.manager._refresh_timer.isActive())

        self.manager.close()
        self.assertFalse(self.manager._refresh_timer.isActive())

    def test_close_twice(self):
        self.manager.close()
        self.manager.close()

    def test_get_manager_after_close_returns_new_instance(self):
        first = refresh.get_manager()
        close_manager()
        second = refresh.get_manager()
        self.assertIsNot(first, second)

        token = second.token
        signals.refreshRequested.emit()
        self.assertEqual(second.token, token + 1)
        self.assertEqual(first.token, 0)
        self.assertTrue(wait_until(lambda: not second._workers))


class FailureTest(RefreshTestCase):
    def test_stale_failure_is_ignored(self):
        failed = []
        self.manager.refreshFailed.connect(failed.append)
        self.manager.refresh()
        self.manager.refresh()

        self.assertFalse(self.manager.fail(1, RuntimeError('connection reset')))
        self.assertEqual(failed, [])

    def test_latest_failure_is_reported(self):
        failed = []
        errors = []

        def on_error(message):
            errors.append(message)

        signals.error.connect(on_error)
        self.addCleanup(signals.error.disconnect, on_error)
        self.manager.refreshFailed.connect(failed.append)
        self.manager.refresh()

        self.assertTrue(self.manager.fail(self.manager.token, RuntimeError('connection reset')))
        self.assertEqual(len(failed), 1)
        self.assertIn('connection reset', failed[0])
        self.assertEqual(errors, failed)


class AsyncRefreshTest(RefreshTestCase):
    """The manager running its cycles and requests on worker threads."""

    def setUp(self) -> None:
        super().setUp()
        self.manager.close()
        self.manager = refresh.RefreshManager(asynchronous=True)

    def _slow_list(self, *args, **kwargs):
        time.sleep(0.05)
        return list(self.transactions)

    def test_overlapping_refreshes_apply_only_the_latest(self):
        self.list_mock.side_effect = self._slow_list
        applied = []
        discarded = []
        self.manager.refreshFinished.connect(lambda result: applied.append(result.token))
        self.manager.refreshDiscarded.connect(discarded.append)

        tokens = [self.manager.refresh() for _ in range(3)]
        self.assertEqual(tokens, [1, 2, 3])

        self.assertTrue(wait_until(lambda: not self.manager._workers))
        self.assertEqual(applied, [3])
        self.assertEqual(sorted(discarded), [1, 2])
        self.assertEqual(len(self.emitted['rows']), 1)
        self.assertEqual(self.list_mock.call_count, 3)

    def test_cycle_runs_off_the_main_thread(self):
        threads = []

        def list_transactions(*args, **kwargs):
            threads.append(threading.get_ident())
            return list(self.transactions)

        self.list_mock.side_effect = list_transactions
        self.manager.refresh()

        self.assertTrue(wait_until(lambda: not self.manager._workers))
        self.assertEqual(len(threads), 1)
        self.assertNotEqual(threads[0], threading.get_ident())

    def test_failed_cycle_emits_refresh_failed(self):
        self.list_mock.side_effect = RuntimeError('connection reset')
        failed = []
        self.manager.refreshFailed.connect(failed.append)

        self.manager.refresh()

        self.assertTrue(wait_until(lambda: not self.manager._workers))
        self.assertEqual(len(failed), 1)
        self.assertIn('connection reset', failed[0])
        self.assertEqual(self.emitted['rows'], [])

    def test_submit_creates_on_worker_thread(self):
        threads = []

        def create(draft):
            threads.append(threading.get_ident())
            return Transaction(5, **draft)

        self.create_mock.side_effect = create

        result = self.manager.submit_transaction('expense', '42', date='2024-05-10')

        self.assertEqual(result.id, 5)
        self.assertEqual(result.amount, 42.0)
        self.assertEqual(len(threads), 1)
        self.assertNotEqual(threads[0], threading.get_ident())
        self.assertEqual(self.emitted['created'], [result])
        self.assertTrue(wait_until(lambda: not self.manager._workers))

    def test_delete_on_worker_thread(self):
        threads = []

        def delete(transaction_id):
            threads.append(threading.get_ident())
            return {'ok': True}

        self.delete_mock.side_effect = delete
        token = self.manager.token

        self.assertTrue(self.manager.delete_transaction(3))
        self.assertEqual(len(threads), 1)
        self.assertNotEqual(threads[0], threading.get_ident())
        self.assertEqual(self.manager.token, token + 1)
        self.assertTrue(wait_until(lambda: not self.manager._workers))

    def test_seed_on_worker_thread(self):
        threads = set()

        def create(draft):
            threads.add(threading.get_ident())
            return Transaction(1, **draft)

        self.create_mock.side_effect = create

        self.assertEqual(self.manager.seed_demo_data(), len(refresh.DEMO_DATA))
        self.assertEqual(len(threads), 1)
        self.assertNotIn(threading.get_ident(), threads)
        self.assertTrue(wait_until(lambda: not self.manager._workers))


class GetManagerTest(BaseTestCase):
    def test_returns_singleton(self):
        manager = refresh.get_manager()
        self.assertIs(refresh.get_manager(), manager)
        manager.deleteLater()


if __name__ == '__main__':
    unittest.main()
