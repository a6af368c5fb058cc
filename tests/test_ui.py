"""
UI tests for PocketPulse.
Verifies the widgets can be instantiated and drive the refresh manager, with the
gateway patched and message boxes answered automatically.
"""
import unittest
from unittest.mock import patch

from PySide6 import QtCore, QtWidgets

from PocketPulse.core import refresh
from PocketPulse.core import service
from PocketPulse.data.data import Series, Summary, Transaction, today_iso
from PocketPulse.settings import lib
from PocketPulse.status import status
from PocketPulse.ui import ui
from PocketPulse.ui.actions import signals
from tests.base import BaseTestCase, summary_record, transaction_records


class UIBaseTestCase(BaseTestCase):
    def setUp(self):
        super().setUp()
        ui.apply_theme()

        self.transactions = [Transaction.from_dict(r) for r in transaction_records()]

        patch.object(service, 'list_transactions', return_value=list(self.transactions)).start()
        patch.object(service, 'fetch_summary', return_value=Summary.from_dict(summary_record())).start()
        self.create_mock = patch.object(service, 'create_transaction').start()
        self.delete_mock = patch.object(service, 'delete_transaction').start()

        self.manager = refresh.RefreshManager(asynchronous=False)
        refresh.refresh_manager = self.manager

    def tearDown(self):
        patch.stopall()
        self.manager = None
        super().tearDown()


class TestStylesheet(UIBaseTestCase):
    def test_init_stylesheet_expands_all_tokens(self):
        qss = ui.init_stylesheet()
        self.assertNotIn('<', qss)
        self.assertNotIn('>', qss)
        self.assertIn(ui.Color.Background(qss=True), qss)

    def test_theme_switch(self):
        lib.settings['theme'] = ui.Theme.Light.value
        self.assertEqual(ui.Color.Text().getRgb()[:3], (30, 30, 30))
        lib.settings['theme'] = ui.Theme.Dark.value
        self.assertEqual(ui.Color.Text().getRgb()[:3], (225, 225, 225))

    def test_unknown_theme_uses_dark(self):
        lib.settings['theme'] = 'sepia'
        self.assertEqual(ui.Color.Text().getRgb()[:3], (225, 225, 225))

    def test_size_scaling(self):
        self.assertEqual(ui.Size.Margin(0.5), 9)
        self.assertEqual(ui.Size.Margin(), 18)
        self.assertEqual(ui.Size.Margin(), round(ui.Size.Margin.value))
        self.assertEqual(ui.Size.Margin(1.5), round(ui.Size.Margin.value * 1.5))

    def test_get_font_rejects_zero(self):
        with self.assertRaises(ValueError):
            ui.get_font(0)


class TestDockableWidget(UIBaseTestCase):
    def test_DockableWidget_init(self):
        from PocketPulse.ui.dockable_widget import DockableWidget
        dock = DockableWidget('title', None)
        self.assertIsNotNone(dock)
        self.assertEqual(dock.windowTitle(), 'title')


class TestTransactionForm(UIBaseTestCase):
    def setUp(self):
        super().setUp()
        from PocketPulse.data.view.form import TransactionForm
        self.form = TransactionForm(None)
        self.warning = patch.object(QtWidgets.QMessageBox, 'warning').start()

    def _fill(self, amount='42', category='Food', description='Dinner'):
        self.form.type_editor.setCurrentIndex(self.form.type_editor.findData('expense'))
        self.form.amount_editor.setText(amount)
        self.form.category_editor.setText(category)
        self.form.date_editor.setDate(QtCore.QDate(2024, 5, 10))
        self.form.description_editor.setText(description)

    def test_defaults(self):
        values = self.form.values()
        self.assertEqual(values['kind'], 'income')
        self.assertEqual(values['amount'], '')
        self.assertEqual(values['category'], '')
        self.assertEqual(values['date'], today_iso())
        self.assertEqual(values['description'], '')
        self.assertEqual(self.form.category_editor.placeholderText(), 'Income')

    def test_invalid_amount_shows_alert_without_request(self):
        self._fill(amount='0')
        self.assertIsNone(self.form.submit())

        self.create_mock.assert_not_called()
        self.warning.assert_called_once()
        self.assertEqual(self.warning.call_args.args[2], 'Enter a valid amount > 0')
        self.assertEqual(self.form.amount_editor.text(), '0')

    def test_failed_create_keeps_fields(self):
        from PocketPulse.data.view.form import CREATE_FAILED
        self.create_mock.return_value = None
        self._fill()

        self.assertIsNone(self.form.submit())

        self.warning.assert_called_once()
        self.assertEqual(self.warning.call_args.args[2], CREATE_FAILED)
        values = self.form.values()
        self.assertEqual(values['kind'], 'expense')
        self.assertEqual(values['amount'], '42')
        self.assertEqual(values['category'], 'Food')
        self.assertEqual(values['date'], '2024-05-10')
        self.assertEqual(values['description'], 'Dinner')

    def test_successful_create_resets_form(self):
        created = Transaction(9, 'expense', 42.0, 'Food', '2024-05-10', 'Dinner')
        self.create_mock.return_value = created
        submitted = []
        self.form.submitted.connect(submitted.append)
        self._fill()

        self.assertEqual(self.form.submit(), created)

        self.create_mock.assert_called_once_with({
            'type': 'expense',
            'amount': 42.0,
            'category': 'Food',
            'date': '2024-05-10',
            'description': 'Dinner',
        })
        self.warning.assert_not_called()
        self.assertEqual(submitted, [created])
        values = self.form.values()
        self.assertEqual(values['kind'], 'income')
        self.assertEqual(values['amount'], '')
        self.assertEqual(values['date'], today_iso())

    def test_form_dock(self):
        from PocketPulse.data.view.form import TransactionFormDockWidget
        dock = TransactionFormDockWidget(None)
        self.assertIsNotNone(dock.form)


class TestTransactionsView(UIBaseTestCase):
    def setUp(self):
        super().setUp()
        from PocketPulse.data.view.transaction import TransactionsView
        self.view = TransactionsView(None)
        self.question = patch.object(QtWidgets.QMessageBox, 'question').start()
        self.warning = patch.object(QtWidgets.QMessageBox, 'warning').start()

        self.manager.set_view_date('2024-05-10')
        self.manager.refresh()

    def _delete_index(self, row):
        from PocketPulse.data.model.transaction import Columns
        return self.view.model().index(row, Columns.Delete.value)

    def test_rows_follow_refresh(self):
        from PocketPulse.data.model.transaction import Columns, IdRole
        model = self.view.model()
        self.assertEqual(model.rowCount(), 4)
        self.assertEqual(model.index(0, Columns.Date.value).data(IdRole), 2)
        self.assertEqual(model.index(0, Columns.Category.value).data(), 'Food')
        self.assertTrue(model.index(0, Columns.Amount.value).data().startswith('- '))
        self.assertTrue(model.index(1, Columns.Amount.value).data().startswith('+ '))

        signals.transactionsChanged.emit([])
        self.assertEqual(model.rowCount(), 0)

    def test_delete_confirmed(self):
        self.question.return_value = QtWidgets.QMessageBox.Yes
        self.delete_mock.return_value = {'ok': True}

        self.assertTrue(self.view.delete_transaction(self._delete_index(0)))
        self.delete_mock.assert_called_once_with(2)
        self.assertEqual(self.question.call_args.args[2], 'Delete this transaction?')
        self.warning.assert_not_called()

    def test_delete_cancelled(self):
        self.question.return_value = QtWidgets.QMessageBox.No

        self.assertFalse(self.view.delete_transaction(self._delete_index(0)))
        self.delete_mock.assert_not_called()

    def test_delete_failure_alerts(self):
        from PocketPulse.data.view.transaction import DELETE_FAILED
        self.question.return_value = QtWidgets.QMessageBox.Yes
        self.delete_mock.return_value = None

        self.assertFalse(self.view.delete_transaction(self._delete_index(2)))
        self.delete_mock.assert_called_once_with(3)
        self.assertEqual(self.warning.call_args.args[2], DELETE_FAILED)

    def test_click_on_delete_column(self):
        self.question.return_value = QtWidgets.QMessageBox.No
        self.view.on_clicked(self._delete_index(1))
        self.question.assert_called_once()

    def test_click_elsewhere_does_nothing(self):
        self.view.on_clicked(self.view.model().index(1, 0))
        self.question.assert_not_called()

    def test_placeholder_paints(self):
        signals.transactionsChanged.emit([])
        self.view.resize(400, 300)
        self.view.grab()

    def test_dock(self):
        from PocketPulse.data.view.transaction import TransactionsDockWidget
        self.assertIsNotNone(TransactionsDockWidget(None).view)


class TestHistoryChart(UIBaseTestCase):
    def setUp(self):
        super().setUp()
        from PocketPulse.data.view.history import HistoryChartView
        self.view = HistoryChartView(None)
        self.view.resize(600, 400)

    def test_new_series_replaces_chart(self):
        first = Series(labels=['2024-05-09', '2024-05-10'], income=[1.0, 2.0], expense=[0.0, 3.0])
        second = Series(labels=['2024-05-10', '2024-05-11'], income=[0.0, 0.0], expense=[5.0, 0.0])

        self.view.set_series(first)
        old = self.view.chart
        self.view.set_series(second)

        self.assertTrue(old.disposed)
        self.assertIsNot(self.view.chart, old)
        self.assertFalse(self.view.chart.disposed)
        self.assertIs(self.view.chart.series, second)

    def test_refresh_delivers_series(self):
        self.manager.set_view_date('2024-05-10')
        self.manager.refresh()
        self.assertEqual(self.view.chart.series.labels[-1], '2024-05-10')
        self.assertEqual(self.view.chart.data_max, 5000.0)

    def test_layout_starts_at_zero(self):
        series = Series(labels=['a', 'b', 'c'], income=[0.0, 10.0, 5.0], expense=[0.0, 0.0, 0.0])
        self.view.set_series(series)
        geom = self.view.chart.geometry

        self.assertEqual(len(geom.xs), 3)
        self.assertAlmostEqual(geom.income_points[0].y(), geom.area.bottom())
        self.assertAlmostEqual(geom.income_points[1].y(), geom.area.top())
        self.assertGreaterEqual(geom.legend.top(), geom.area.bottom())
        self.assertEqual(self.view.chart.index_at(geom.xs[2] + 1.0), 2)

    def test_all_zero_series(self):
        self.view.set_series(Series(labels=['a', 'b'], income=[0.0, 0.0], expense=[0.0, 0.0]))
        self.assertEqual(self.view.chart.data_max, 0.0)
        self.view.grab()

    def test_clear(self):
        self.view.set_series(Series(labels=['a'], income=[1.0], expense=[1.0]))
        chart = self.view.chart
        self.view.clear()
        self.assertIsNone(self.view.chart)
        self.assertTrue(chart.disposed)
        self.view.grab()


class TestSummaryWidget(UIBaseTestCase):
    def test_shows_delivered_summary(self):
        from PocketPulse.data.view.summary import SummaryWidget
        widget = SummaryWidget(None)

        self.assertIn('0.00', widget.labels['daily_income'].text())

        signals.summaryChanged.emit(Summary.from_dict(summary_record()))
        self.assertIn('5,000.00', widget.labels['daily_income'].text())
        self.assertIn('120.50', widget.labels['daily_expense'].text())
        self.assertIn('10,250.00', widget.labels['lifetime_balance'].text())
        self.assertEqual(widget.summary.month_balance, 6179.5)


class TestToolBar(UIBaseTestCase):
    def setUp(self):
        super().setUp()
        from PocketPulse.ui.toolbar import ViewToolBar
        self.toolbar = ViewToolBar(None)

    def test_controls_update_view_state(self):
        self.toolbar.date_editor.setDate(QtCore.QDate(2024, 5, 10))
        self.toolbar.type_filter_editor.setCurrentIndex(self.toolbar.type_filter_editor.findData('income'))
        self.toolbar.search_editor.setText('salary')

        self.assertEqual(self.toolbar.view_date(), '2024-05-10')
        self.assertEqual(self.manager.state, refresh.ViewState('2024-05-10', 'income', 'salary'))

    def test_seed_requires_confirmation(self):
        with patch.object(QtWidgets.QMessageBox, 'question', return_value=QtWidgets.QMessageBox.No):
            self.toolbar.seed_action.trigger()
        self.create_mock.assert_not_called()

        self.create_mock.return_value = None
        with patch.object(QtWidgets.QMessageBox, 'question', return_value=QtWidgets.QMessageBox.Yes):
            self.toolbar.seed_action.trigger()
        self.assertEqual(self.create_mock.call_count, len(refresh.DEMO_DATA))

    def test_reload_refreshes(self):
        token = self.manager.token
        self.toolbar.reload_action.trigger()
        self.assertEqual(self.manager.token, token + 1)


class TestLogView(UIBaseTestCase):
    def test_LogTableView_init(self):
        from PocketPulse.log.view import LogTableView
        self.assertIsNotNone(LogTableView(None))

    def test_LogDockWidget_init(self):
        from PocketPulse.log.view import LogDockWidget
        dock = LogDockWidget(None)
        self.assertIsNotNone(dock)
        for action in dock.view.actions():
            if action.text() == 'Clear Logs':
                action.trigger()
        self.assertEqual(dock.view.model().sourceModel().rowCount(), 0)


class TestMainWindow(UIBaseTestCase):
    def test_MainWindow_init(self):
        from PocketPulse.ui.main import MainWindow
        window = MainWindow(None)
        self.assertIs(window.manager, self.manager)
        self.assertEqual(window.windowTitle(), 'PocketPulse')
        self.assertFalse(window.log_view.isVisible())

    def test_error_shows_in_status_bar(self):
        from PocketPulse.ui.main import MainWindow
        window = MainWindow(None)
        status.ServiceUnavailableException('Timeout calling GET /transactions')
        self.assertIn('Timeout', window.statusBar().currentMessage())

    def test_refresh_populates_views(self):
        from PocketPulse.ui.main import MainWindow
        window = MainWindow(None)
        self.manager.refresh()
        self.assertEqual(window.transactions_view.view.model().rowCount(), 4)
        self.assertIsNotNone(window.history_view.chart)
        self.assertEqual(window.summary_view.summary.lifetime_balance, 10250.0)

    def test_created_transaction_shows_in_status_bar(self):
        from PocketPulse.ui.main import MainWindow
        window = MainWindow(None)
        self.create_mock.return_value = Transaction(9, 'expense', 42.0, 'Food', '2024-05-10', 'Dinner')

        self.manager.submit_transaction('expense', '42', 'Food', '2024-05-10', 'Dinner')

        message = window.statusBar().currentMessage()
        self.assertTrue(message.startswith('Added expense of '))
        self.assertIn('42.00', message)
        self.assertIn('Food', message)

    def test_failed_refresh_replaces_refreshing_message(self):
        from PocketPulse.ui.main import MainWindow, REFRESHING_MESSAGE
        window = MainWindow(None)
        self.manager.refreshStarted.emit(1)
        self.assertEqual(window.statusBar().currentMessage(), REFRESHING_MESSAGE)

        self.manager.fail(self.manager.token, RuntimeError('connection reset'))

        message = window.statusBar().currentMessage()
        self.assertNotEqual(message, REFRESHING_MESSAGE)
        self.assertIn('connection reset', message)

    def test_finished_refresh_clears_refreshing_message(self):
        from PocketPulse.ui.main import MainWindow
        window = MainWindow(None)
        self.manager.refresh()
        self.assertEqual(window.statusBar().currentMessage(), '')


if __name__ == '__main__':
    unittest.main()
