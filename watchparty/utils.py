"""
Utility functions for ID generation
"""
import random
import string


def generate_connection_id(length: int = 12) -> str:
    """Generate a random connection ID"""
    alphabet = string.ascii_lowercase + string.digits
    return "conn_" + "".join(random.choice(alphabet) for _ in range(length))


def generate_room_id(length: int = 6) -> str:
    """Generate a short, upper-case room ID that is easy to read out loud"""
    return "".join(random.choice(string.digits + string.ascii_uppercase) for _ in range(length))
