from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    AGENT = "AGENT"
    ADMIN = "ADMIN"

    def __str__(self):
        return self.value


class MessageChannel(str, Enum):
    NORMAL = "NORMAL"
    WHATSAPP_REDIRECT = "WHATSAPP_REDIRECT"

    def __str__(self):
        return self.value


class ActorType(str, Enum):
    USER = "user"
    ADMIN = "admin"

    def __str__(self):
        return self.value


class WhatsAppFailure(str, Enum):
    NO_PHONE_NUMBER = "NoPhoneNumber"
    INVALID_PHONE_FORMAT = "InvalidPhoneFormat"

    def __str__(self):
        return self.value


class AuditAction(str, Enum):
    REGISTER = "register"
    LOGIN = "login"
    SEND_DIRECT_MESSAGE = "send_direct_message"
    SEND_GROUP_MESSAGE = "send_group_message"
    CREATE_GROUP = "create_group"
    ADD_GROUP_MEMBER = "add_group_member"
    CREATE_NOTE = "create_note"
    UPDATE_NOTE = "update_note"
    DELETE_NOTE = "delete_note"
    WHATSAPP_LINK = "whatsapp_link"
    ADMIN_LOGIN = "admin_login"
    ADMIN_UPDATE_USER = "admin_update_user"
    ADMIN_DELETE_USER = "admin_delete_user"
    ADMIN_CHANGE_PASSWORD = "admin_change_password"

    def __str__(self):
        return self.value
