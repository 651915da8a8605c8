from typing import Any, Dict, List, Mapping


def default_list(config: Mapping[str, Any]) -> List[Dict[str, Any]]:
    """
    Rows that must exist after start-up. An entry is skipped when any row of
    `object_name` already has `key == value`.
    """
    return [
        {
            "object_name": "ACCOUNT",
            "type": "NOT_NULL",
            "key": "role",
            "value": "Admin",
            "data": {
                "username": config.get("DEFAULT_ADMIN_USERNAME", "admin"),
                "email": config.get("DEFAULT_ADMIN_EMAIL", "admin@storefront.io"),
                "password": config.get("DEFAULT_ADMIN_PASSWORD", "Storefront"),
                "first_name": "Store",
                "last_name": "Admin",
            },
        },
    ]
