'''
Operations Reporting Test Suite

Test Modules:
-------------
- test_calendar.py: Period boundaries, date ranges, leap years, ISO weeks
- test_record_filter.py: Date-prefix filtering of raw records
- test_upstream.py: Login and page requests against a mocked HTTP session
- test_pagination.py: Page loop termination, failure propagation, single-day window
- test_adapters.py: Category request bodies and day filtering
- test_ticket_scanner.py: Deduplication, early stop, fail-soft scan
- test_aggregator.py: Period aggregation order and category sequencing
- test_spreadsheet.py: Workbook sheets, headers and styling
- test_retry.py: Attempt count and backoff schedule
- test_email_report.py: Subjects, summary body, attachment, SMTP errors
- test_failure_report.py: Failure e-mails never raise; crash hook delivery
- test_messaging_report.py: Session lifecycle, startup timeout, retries
- test_report_runs.py: Run orchestration and channel isolation
- test_scheduler.py: Next fire times and due runs
- test_api.py: Schedule and manual trigger endpoints

Running Tests:
--------------
    pip install -e ".[test]"
    pytest opsreport/tests -v

Configuration:
--------------
See conftest.py for shared fixtures and test configuration.
'''

__all__ = []
