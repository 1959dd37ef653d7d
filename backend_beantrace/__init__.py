"""
Backend BeanTrace: ledger annotation ingestion for coffee supply-chain records.

Polls an Algorand indexer for tracked accounts, decodes transaction notes,
extracts roasting / processing / harvest fields and stores everything idempotently.
"""
