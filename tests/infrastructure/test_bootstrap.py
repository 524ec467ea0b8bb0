"""Tests for the composition root."""

import threading

from ims.infrastructure import bootstrap
from ims.infrastructure.config import Settings


def _settings(tmp_path):
    return Settings(DATA_DIR=tmp_path)


class TestSharedLedger:

    def test_one_ledger_per_data_dir(self, tmp_path):
        settings = _settings(tmp_path)
        ledger = bootstrap.stock_ledger(settings)

        assert bootstrap.stock_ledger(_settings(tmp_path)) is ledger
        assert bootstrap.receiving_workflow(settings)._ledger is ledger
        assert bootstrap.delivery_workflow(settings)._ledger is ledger
        assert bootstrap.stock_ledger(_settings(tmp_path / "other")) is not ledger

    def test_workflows_serialize_on_the_same_lock(self, tmp_path):
        settings = _settings(tmp_path)
        receiving = bootstrap.receiving_workflow(settings)
        delivery = bootstrap.delivery_workflow(settings)
        acquired = []

        def contend():
            lock = delivery._ledger.locked()
            got = lock.acquire(timeout=0.2)
            acquired.append(got)
            if got:
                lock.release()

        with receiving._ledger.locked():
            worker = threading.Thread(target=contend)
            worker.start()
            worker.join()

        assert acquired == [False]
