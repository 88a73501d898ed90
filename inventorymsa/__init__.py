"""InventoryMSA: 주문 재고 할당 사가(saga)의 재고 서비스."""
from inventorymsa.config import InventoryConfig, InventoryMSA, load_config  # noqa

__version__ = "0.1.0"
