from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_CHAIN_NAMES = {
    "eip155:1": "eth",
    "eip155:10": "optimism",
    "eip155:56": "bsc",
    "eip155:137": "matic",
    "eip155:8453": "base",
    "eip155:42161": "arb1",
    "eip155:43114": "avax",
    "eip155:59144": "linea",
}


class Settings(BaseSettings):
    # storage
    database_url: str = ""
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout_s: int = 30
    db_pool_recycle_s: int = 1800

    log_level: str = "INFO"
    log_json: bool = False

    # wallet provider
    wallet_auth_url: str = "https://paymagicapi.com/v1/auth"
    wallet_resolver_url: str = "https://paymagicapi.com/v1/resolver"
    wallet_tx_url: str = "https://paymagicapi.com/v1/kernel/tx"
    wallet_tx_status_url: str = "https://paymagicapi.com/v1/kernel/txStatus"
    wallet_client_id: str = ""
    wallet_client_secret: str = ""
    wallet_user_prefix: str = "grindery"
    wallet_timeout_s: float = 100.0
    wallet_non_retryable_status: int = 470

    # routing defaults, resolved per call
    default_chain_id: str = "eip155:137"
    default_chain_name: str = "matic"
    chain_names: dict[str, str] = DEFAULT_CHAIN_NAMES
    default_token_address: str = "0xe36BD65609c08Cd17b53520293523CF4560533d0"
    default_token_symbol: str = "G1"
    default_token_decimals: int = 18
    native_token_addresses: list[str] = [
        "0x0",
        "0x0000000000000000000000000000000000000000",
        "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
    ]

    source_tg_id: str = ""
    source_wallet_address: str = ""
    pending_hash_timeout_minutes: int = 10

    signup_reward_amount: str = "100"
    referral_reward_amount: str = "50"
    link_reward_amount: str = "10"

    # workflow webhooks (empty url = disabled)
    flowxo_webhook_api_key: str = ""
    flowxo_new_signup_reward_webhook: str = ""
    flowxo_new_referral_reward_webhook: str = ""
    flowxo_new_link_reward_webhook: str = ""
    flowxo_new_isolated_reward_webhook: str = ""
    flowxo_new_transaction_webhook: str = ""
    flowxo_new_swap_webhook: str = ""
    flowxo_new_vesting_webhook: str = ""
    flowxo_new_order_webhook: str = ""

    # analytics (empty key = disabled)
    segment_key: str = ""
    segment_track_url: str = "https://api.segment.io/v1/track"
    segment_identify_url: str = "https://api.segment.io/v1/identify"

    # hedgey vesting
    hedgey_batch_planner_address: str = "0x3466EB008EDD8d5052446293D1a7D212cb65C646"
    hedgey_vesting_locker: str = "0x2CDE9919e81b20B4B33DD562a48a84b54C48F00C"
    hedgey_lockup_locker: str = "0x1961A23409CA59EEDCA6a99c97E4087DaD752486"
    vesting_admin_address: str = ""
    vesting_start_timestamp: int = 1704067200
    token_lock_term_s: int = 31536000

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def DATABASE_URL(self) -> str:
        return self.database_url

    @property
    def SOURCE_TG_ID(self) -> str:
        return self.source_tg_id

    def chain_name(self, chain_id: str | None) -> str:
        if not chain_id:
            return self.default_chain_name
        return self.chain_names.get(chain_id, self.default_chain_name)

    def is_native_token(self, token_address: str | None) -> bool:
        if not token_address:
            return False
        return token_address.lower() in {a.lower() for a in self.native_token_addresses}


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader (process-level).
    """
    return Settings()
