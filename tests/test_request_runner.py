"""Tests for background execution with delivery on the owning thread."""

import threading

from PySide6.QtCore import QCoreApplication, QThreadPool

from studio_core.request_runner import RequestRunner


def _drain(runner: RequestRunner) -> None:
    assert runner.wait_for_done(5000)
    QCoreApplication.sendPostedEvents()
    QCoreApplication.processEvents()


def test_success_is_delivered_on_owner_thread():
    runner = RequestRunner(pool=QThreadPool())
    worker_threads, results = [], []
    main_thread = threading.get_ident()

    def job():
        worker_threads.append(threading.get_ident())
        return 42

    runner.submit(job, lambda value: results.append((value, threading.get_ident())), lambda exc: results.append(exc))
    _drain(runner)

    assert results == [(42, main_thread)]
    assert worker_threads and worker_threads[0] != main_thread


def test_exception_is_delivered_to_error_callback():
    runner = RequestRunner(pool=QThreadPool())
    errors = []

    def job():
        raise ValueError("boom")

    runner.submit(job, lambda value: errors.append(("unexpected", value)), errors.append)
    _drain(runner)

    assert len(errors) == 1
    assert isinstance(errors[0], ValueError)
