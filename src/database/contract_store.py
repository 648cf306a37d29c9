"""
In-memory store for asynchronously generated provider contracts.

Contracts live for the lifetime of the process. Each provider has its own
keyspace; a contract id is only known to the provider that issued it.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import replace
from typing import Dict, Iterable, Optional

from src.integrations.contracts.interfaces import (
    ContractInput,
    ContractStatus,
    CostBreakdown,
    ProviderName,
    StoredContract,
)
from src.quotes.errors import RecordNotFound


class ContractStore:
    def __init__(self, providers: Optional[Iterable[ProviderName]] = None) -> None:
        self._contracts: Dict[ProviderName, Dict[str, StoredContract]] = {
            ProviderName(p): {} for p in (providers or list(ProviderName))
        }
        self._lock = threading.Lock()

    def create(self, provider: ProviderName, contract_input: ContractInput) -> StoredContract:
        contract = StoredContract(id=str(uuid.uuid4()), provider=ProviderName(provider), input=contract_input)
        with self._lock:
            self._contracts.setdefault(contract.provider, {})[contract.id] = contract
        return contract

    def get(self, provider: ProviderName, contract_id: str) -> Optional[StoredContract]:
        with self._lock:
            return self._contracts.get(ProviderName(provider), {}).get(contract_id)

    def mark_ready(self, provider: ProviderName, contract_id: str, costs: CostBreakdown) -> bool:
        """Move a pending contract to ready. Returns False if it was already ready."""
        with self._lock:
            contracts = self._contracts.get(ProviderName(provider), {})
            current = contracts.get(contract_id)
            if current is None:
                raise RecordNotFound(
                    f"Contract {contract_id} not found",
                    payload={"contract_id": contract_id, "provider": ProviderName(provider).value},
                )
            if current.status is not ContractStatus.PENDING:
                return False
            # swap in a new object so readers never see a half-written contract
            contracts[contract_id] = replace(
                current,
                status=ContractStatus.READY,
                costs=costs,
            )
            return True
