"""Conversation persistence through the separate data microservice.

Public API:
    - DataServiceClient: async REST client for ``/api/messages``
    - MessageCreate: validated payload for a new message
    - group_by_conversation: history grouping helper
    - create_data_service_client: factory building the client from settings
"""
from roadtrip_advisor.services.data_service.client import (
    DataServiceClient,
    create_data_service_client,
    group_by_conversation,
)
from roadtrip_advisor.services.data_service.schemas import MessageCreate

__all__ = [
    "DataServiceClient",
    "MessageCreate",
    "create_data_service_client",
    "group_by_conversation",
]
