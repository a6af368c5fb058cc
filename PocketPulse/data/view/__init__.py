"""Qt views for the PocketPulse application.

This subpackage provides:

- TransactionForm: the entry form creating transactions
- TransactionsView: the filtered transaction table with a confirmed delete control
- SummaryWidget: the daily, monthly and lifetime figures for the viewed date
- HistoryChartView: the 7-day income/expense line chart
"""
