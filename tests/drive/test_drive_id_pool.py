import itertools
import unittest
from unittest.mock import Mock

from gdrivesync.drive.id_pool import IdPool
from gdrivesync.errors import (
    NetworkError,
    OutOfIdentifiersError,
    PoolRefillError,
)


def _counting_service() -> Mock:
    counter = itertools.count()
    service = Mock()
    service.generate_ids.side_effect = lambda count, delegate: [
        f"id-{next(counter)}" for _ in range(count)
    ]
    return service


class TestIdPool(unittest.TestCase):
    def test_refills_once_per_batch(self) -> None:
        service = _counting_service()
        pool = IdPool(service, batch_size=1000)

        ids = [pool.next() for _ in range(1001)]

        self.assertEqual(pool.refill_count, 2)
        self.assertEqual(service.generate_ids.call_count, 2)
        self.assertEqual(len(set(ids)), 1001)

    def test_ids_are_handed_out_in_returned_order(self) -> None:
        service = Mock()
        service.generate_ids.return_value = ["a", "b", "c"]
        pool = IdPool(service, batch_size=3)

        self.assertEqual([pool.next(), pool.next(), pool.next()], ["a", "b", "c"])
        self.assertEqual(service.generate_ids.call_args.args[0], 3)

    def test_empty_refill_raises_out_of_identifiers(self) -> None:
        service = Mock()
        service.generate_ids.return_value = []
        pool = IdPool(service)

        with self.assertRaises(OutOfIdentifiersError):
            pool.next()

    def test_service_failure_raises_pool_refill_error(self) -> None:
        service = Mock()
        cause = NetworkError("down")
        service.generate_ids.side_effect = cause
        pool = IdPool(service)

        with self.assertRaises(PoolRefillError) as ctx:
            pool.next()
        self.assertIs(ctx.exception.cause, cause)

    def test_invalid_batch_size(self) -> None:
        with self.assertRaises(ValueError):
            IdPool(Mock(), batch_size=0)


if __name__ == "__main__":
    unittest.main()
