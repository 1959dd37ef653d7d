"""
Ledger client: paginated reads of account transactions from the Algorand indexer.
"""

from backend_beantrace.ledger_client.client import IndexerClient, LedgerClient
from backend_beantrace.ledger_client.decoder import decode_note
from backend_beantrace.ledger_client.models import LedgerPage, LedgerTransaction

__all__ = [
    "IndexerClient",
    "LedgerClient",
    "LedgerPage",
    "LedgerTransaction",
    "decode_note",
]
