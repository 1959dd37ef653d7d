"""
SQLAlchemy models for the relational store.

One table for ledger transactions, one per extracted-record kind and one for
per-account sync checkpoints. Timestamps are Unix seconds (Integer).

Uniqueness: ledger_transactions.tx_id, <kind>_records.transaction_key,
sync_checkpoints.account.
"""

from __future__ import annotations

from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base

from backend_beantrace.extraction.records import RecordKind

Base = declarative_base()


class LedgerTransactionRow(Base):
    """Raw ledger transaction; aggregate root for extracted records."""

    __tablename__ = "ledger_transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tx_id = Column(String(64), unique=True, nullable=False)
    account = Column(String(64), nullable=False, index=True)  # first tracked account that observed it
    round = Column(BigInteger, nullable=False, index=True)
    round_time = Column(Integer, nullable=True)  # Unix
    sender = Column(String(64), nullable=True)
    receiver = Column(String(64), nullable=True)
    amount = Column(BigInteger, nullable=True)
    fee = Column(BigInteger, nullable=True)
    tx_type = Column(String(16), nullable=True)
    note_raw = Column(Text, nullable=True)  # base64 as delivered
    note_decoded = Column(Text, nullable=True)
    raw_json = Column(Text, nullable=False)
    created_at = Column(Integer, nullable=False)


class RoastingRow(Base):
    __tablename__ = "roasting_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_key = Column(
        Integer, ForeignKey("ledger_transactions.id"), unique=True, nullable=False
    )
    tx_id = Column(String(64), nullable=False, index=True)
    parent_company_id = Column(String(64), nullable=True)
    production_batch_id = Column(String(128), nullable=True)
    type_of_roast = Column(Text, nullable=True)
    location_of_roasting_plant = Column(Text, nullable=True)
    kg_coffee_roasted = Column(String(64), nullable=True)
    roast_date = Column(String(32), nullable=True)
    zone1_coffee_species = Column(Text, nullable=True)
    zone1_harvest_begin = Column(String(32), nullable=True)
    zone1_harvest_end = Column(String(32), nullable=True)
    zone2_coffee_species = Column(Text, nullable=True)
    zone2_harvest_begin = Column(String(32), nullable=True)
    zone2_harvest_end = Column(String(32), nullable=True)
    child_tx = Column(String(128), nullable=True)
    raw_text = Column(Text, nullable=False)
    created_at = Column(Integer, nullable=False)
    updated_at = Column(Integer, nullable=False)


class ProcessingRow(Base):
    __tablename__ = "processing_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_key = Column(
        Integer, ForeignKey("ledger_transactions.id"), unique=True, nullable=False
    )
    tx_id = Column(String(64), nullable=False, index=True)
    reception_ids = Column(Text, nullable=True)
    post_hull_ids = Column(Text, nullable=True)
    size_of_beans = Column(Text, nullable=True)
    qty_green_coffee = Column(String(64), nullable=True)
    sort_entry = Column(String(32), nullable=True)
    sort_exit = Column(String(32), nullable=True)
    harvest_begin = Column(String(32), nullable=True)
    harvest_end = Column(String(32), nullable=True)
    raw_text = Column(Text, nullable=False)
    created_at = Column(Integer, nullable=False)
    updated_at = Column(Integer, nullable=False)


class HarvestRow(Base):
    __tablename__ = "harvest_records"

    id = Column(Integer, primary_key=True, autoincrement=True)
    transaction_key = Column(
        Integer, ForeignKey("ledger_transactions.id"), unique=True, nullable=False
    )
    tx_id = Column(String(64), nullable=False, index=True)
    farm_id = Column(String(128), nullable=True)
    farm_anagraphic = Column(Text, nullable=True)
    farm_location = Column(Text, nullable=True)
    fields_data = Column(Text, nullable=True)  # JSON array
    raw_text = Column(Text, nullable=False)
    created_at = Column(Integer, nullable=False)
    updated_at = Column(Integer, nullable=False)


class SyncCheckpointRow(Base):
    """Highest fully processed round per tracked account."""

    __tablename__ = "sync_checkpoints"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account = Column(String(64), unique=True, nullable=False)
    last_round = Column(BigInteger, nullable=True)
    last_synced_at = Column(Integer, nullable=False)
    created_at = Column(Integer, nullable=False)


KIND_TABLES: dict[RecordKind, type] = {
    RecordKind.ROASTING: RoastingRow,
    RecordKind.PROCESSING: ProcessingRow,
    RecordKind.HARVEST: HarvestRow,
}
