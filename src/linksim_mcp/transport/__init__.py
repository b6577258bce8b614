"""Transport layer: the shared delivery queue and the hosts attached to it."""

from .delivery_queue import DeliveryQueue
from .endpoint import Endpoint
