"""
Tests for the status derivation helpers.
"""

import uuid
from decimal import Decimal
from types import SimpleNamespace
from django.test import SimpleTestCase

from ..models import DispatchStatus, ProductionStage, ProductionStatus
from ..services.reconciliation import (
    allocate_fifo, derive_dispatch_status, derive_line_status,
    derive_production_stage, sent_quantities,
)


def make_line(quantity, produced=0, status=ProductionStatus.PENDING):
    return SimpleNamespace(
        id=uuid.uuid4(),
        quantity=Decimal(str(quantity)),
        produced=Decimal(str(produced)),
        production_status=status,
    )


def make_item(line_item, quantity_sent):
    return SimpleNamespace(order_product_id=line_item.id, quantity_sent=Decimal(str(quantity_sent)))


class AllocateFifoTest(SimpleTestCase):
    """Test greedy FIFO distribution."""

    def test_fills_needs_in_order(self):
        allocations, remaining = allocate_fifo([('a', 10), ('b', 5)], 12)

        self.assertEqual(allocations, [('a', Decimal('10')), ('b', Decimal('2'))])
        self.assertEqual(remaining, Decimal('0'))

    def test_surplus_is_returned(self):
        allocations, remaining = allocate_fifo([('a', 10), ('b', 5)], 20)

        self.assertEqual(sum(take for _, take in allocations), Decimal('15'))
        self.assertEqual(remaining, Decimal('5'))

    def test_non_positive_needs_are_skipped(self):
        allocations, remaining = allocate_fifo([('a', 0), ('b', -3), ('c', 4)], 3)

        self.assertEqual(allocations, [('c', Decimal('3'))])
        self.assertEqual(remaining, Decimal('0'))

    def test_nothing_to_allocate(self):
        allocations, remaining = allocate_fifo([], Decimal('7.5'))

        self.assertEqual(allocations, [])
        self.assertEqual(remaining, Decimal('7.5'))


class DeriveDispatchStatusTest(SimpleTestCase):
    """Test dispatch status derivation."""

    def setUp(self):
        self.cake = make_line(10)
        self.bread = make_line(5)

    def test_nothing_sent(self):
        self.assertEqual(derive_dispatch_status([self.cake, self.bread], []), DispatchStatus.NOT_SENT)

    def test_partial(self):
        items = [make_item(self.cake, 10)]
        self.assertEqual(derive_dispatch_status([self.cake, self.bread], items), DispatchStatus.PARTIAL)

    def test_sent_when_every_line_matches_across_dispatches(self):
        items = [make_item(self.cake, 4), make_item(self.cake, 6), make_item(self.bread, 5)]
        self.assertEqual(derive_dispatch_status([self.cake, self.bread], items), DispatchStatus.SENT)

    def test_overshipment_wins_over_partial(self):
        items = [make_item(self.cake, 11)]
        self.assertEqual(derive_dispatch_status([self.cake, self.bread], items), DispatchStatus.PROBLEM)

    def test_lines_with_the_same_name_are_kept_apart(self):
        first = make_line(3)
        second = make_line(3)
        items = [make_item(first, 6)]

        self.assertEqual(derive_dispatch_status([first, second], items), DispatchStatus.PROBLEM)

    def test_order_without_lines_is_not_sent(self):
        self.assertEqual(derive_dispatch_status([], []), DispatchStatus.NOT_SENT)

    def test_sent_quantities_sums_per_line(self):
        items = [make_item(self.cake, 2), make_item(self.cake, 3), make_item(self.bread, 1)]

        totals = sent_quantities(items)

        self.assertEqual(totals[self.cake.id], Decimal('5'))
        self.assertEqual(totals[self.bread.id], Decimal('1'))


class DeriveProductionStageTest(SimpleTestCase):
    """Test production stage and line status derivation."""

    def test_finished_when_all_lines_produced(self):
        lines = [make_line(10, 10), make_line(5, 0, ProductionStatus.COMPLETED)]
        self.assertEqual(derive_production_stage(ProductionStage.PENDING, lines), ProductionStage.FINISHED)

    def test_pending_moves_to_in_process_on_progress(self):
        lines = [make_line(10, 2), make_line(5)]
        self.assertEqual(derive_production_stage(ProductionStage.PENDING, lines), ProductionStage.IN_PROCESS)

    def test_pending_without_progress_stays(self):
        self.assertEqual(
            derive_production_stage(ProductionStage.PENDING, [make_line(10)]),
            ProductionStage.PENDING
        )

    def test_delayed_is_kept_until_finished(self):
        lines = [make_line(10, 5)]
        self.assertEqual(derive_production_stage(ProductionStage.DELAYED, lines), ProductionStage.DELAYED)

        lines = [make_line(10, 10)]
        self.assertEqual(derive_production_stage(ProductionStage.DELAYED, lines), ProductionStage.FINISHED)

    def test_reopened_line_takes_finished_order_back_to_in_process(self):
        lines = [make_line(10, 10), make_line(5, 2, ProductionStatus.IN_PROCESS)]
        self.assertEqual(derive_production_stage(ProductionStage.FINISHED, lines), ProductionStage.IN_PROCESS)

    def test_line_status_follows_produced(self):
        self.assertEqual(derive_line_status(make_line(10)), ProductionStatus.PENDING)
        self.assertEqual(derive_line_status(make_line(10, 3)), ProductionStatus.IN_PROCESS)
        self.assertEqual(derive_line_status(make_line(10, 10)), ProductionStatus.COMPLETED)
