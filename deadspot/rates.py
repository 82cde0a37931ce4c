from __future__ import annotations

from dataclasses import dataclass

from deadspot.errors import InvalidInput


@dataclass(frozen=True)
class CryptoInfo:
    """Static rate-table entry for one stakeable crypto kind."""

    id: str
    display_name: str
    deposit_address: str
    annual_rate_percent: float


RATE_TABLE: dict[str, CryptoInfo] = {
    c.id: c
    for c in (
        CryptoInfo(
            "dogs", "DOGS (TON)", "UQArqoMhUHIsfq9xsATWfZ_zj7nPJTiShe6LSjqbrJFow9rI", 2.5
        ),
        CryptoInfo("dogecoin", "Dogecoin", "DDVYeK8MiizfsnzLtigSAWfx6PH24puQze", 3.2),
        CryptoInfo("trx", "TRX", "TY4o9UKBz32xi8hexbv6XhccqGBqSk8oJ7", 2.8),
        CryptoInfo(
            "matic", "MATIC (Polygon)", "0x380060e81A820a1691fA58C84ba27c23ed1Eff77", 3.0
        ),
        CryptoInfo("litecoin", "Litecoin", "M9NRbJWHaM6Ry7SaG1tjj6qE4XXeYS7mVr", 2.7),
        CryptoInfo(
            "solana", "Solana", "CWnduVqeRQrxqhGPNDnHTqHWM1dJLqCnojhMQS8FEUFB", 3.5
        ),
        CryptoInfo("pepe", "PEPE", "0x9af5CEd5b30a94794d9C070a78F77b65eb357e12", 4.0),
    )
}


def get_crypto(kind: str, table: dict[str, CryptoInfo] | None = None) -> CryptoInfo:
    """Look up *kind* in the rate table. Raises InvalidInput if unknown."""
    table = RATE_TABLE if table is None else table
    info = table.get(kind) if kind else None
    if info is None:
        raise InvalidInput(
            f"Unknown crypto kind: {kind!r}. Expected one of {sorted(table)}"
        )
    return info
