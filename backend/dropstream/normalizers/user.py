def normalize_user(user, admin=False):
    data = {
        "id": user.id,
        "username": user.username,
        "display_name": user.display_name,
        "avatar_url": user.avatar_url,
    }

    if admin:
        data["email"] = user.email
        data["platform_role"] = user.platform_role
        data["created_at"] = user.created_at.isoformat() if user.created_at else None

    return data
