from db.models.order import Order
from db.models.quote import Quote
from db.models.reward import Reward
from db.models.swap import Swap
from db.models.transfer import Transfer
from db.models.user import User
from db.models.vesting import Vesting

__all__ = ["Order", "Quote", "Reward", "Swap", "Transfer", "User", "Vesting"]
