from guildgate.store.policy_store import PolicyStore

__all__ = ["PolicyStore"]
