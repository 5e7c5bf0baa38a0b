from shared.models.account import CurrentAccount

__all__ = ["CurrentAccount"]
