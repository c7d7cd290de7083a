import pytest

from printqueue.models.filament import Filament
from printqueue.services import filament_ledger
from tests.helpers import add_filament, load_filament


def test_consume_adds_weight(database, session):
    filament_id = add_filament(database, used_weight=100.0)

    filament_ledger.consume(session, filament_id, 30.0)
    session.commit()

    assert load_filament(database, filament_id).used_weight == pytest.approx(130.0)


def test_refund_never_goes_below_zero(database, session):
    filament_id = add_filament(database, used_weight=10.0)

    filament_ledger.refund(session, filament_id, 30.0)
    session.commit()

    assert load_filament(database, filament_id).used_weight == 0.0


def test_consume_unknown_filament_is_noop(session):
    assert filament_ledger.consume(session, 999, 10.0) is None
    assert filament_ledger.refund(session, None, 10.0) is None


def test_consume_allows_overuse():
    # Überverbrauch bleibt sichtbar, Restgewicht fällt aber nicht unter 0
    filament = Filament(name="PETG", total_weight=100.0, used_weight=150.0)
    assert filament_ledger.remaining_weight(filament) == 0.0
    assert filament_ledger.remaining_percent(filament) == 0.0


def test_remaining_percent_uses_total_weight_without_spool_data():
    filament = Filament(name="PLA", total_weight=1000.0, used_weight=250.0)
    assert filament_ledger.remaining_weight(filament) == 750.0
    assert filament_ledger.remaining_percent(filament) == 75.0


def test_remaining_percent_uses_spool_capacity():
    filament = Filament(name="PLA", total_weight=2000.0, used_weight=500.0, spool_weight=1000.0, spool_count=2)
    assert filament_ledger.remaining_percent(filament) == 75.0


def test_remaining_percent_rounds_to_one_decimal():
    filament = Filament(name="PLA", total_weight=3000.0, used_weight=1000.0)
    assert filament_ledger.remaining_percent(filament) == 66.7


def test_remaining_percent_without_capacity():
    filament = Filament(name="Resto", total_weight=0.0, used_weight=0.0)
    assert filament_ledger.remaining_percent(filament) is None
