class ResponseMessages:
    """Standard service error messages"""

    ACCESS_DENIED = "Access denied."
    HOUSEHOLD_NOT_FOUND = "Household not found"
    MEMBER_NOT_FOUND = "Member not found"
    USER_NOT_FOUND = "User not found"
    CHORE_NOT_FOUND = "Chore not found"
    SUBTASK_NOT_FOUND = "Subtask not found"
    SWAP_REQUEST_NOT_FOUND = "Swap request not found"
    EXPENSE_NOT_FOUND = "Expense not found"
    RECEIPT_NOT_FOUND = "Receipt not found"
    TRANSACTION_NOT_FOUND = "Transaction not found"
    EVENT_NOT_FOUND = "Event not found"
    REMINDER_NOT_FOUND = "Reminder not found"
    RECURRENCE_RULE_NOT_FOUND = "Recurrence rule not found"
    THREAD_NOT_FOUND = "Thread not found"
    MESSAGE_NOT_FOUND = "Message not found"
    ATTACHMENT_NOT_FOUND = "Attachment not found"
    REACTION_NOT_FOUND = "Reaction not found"
    MENTION_NOT_FOUND = "Mention not found"
    POLL_NOT_FOUND = "Poll not found"
    POLL_OPTION_NOT_FOUND = "Poll option not found"
    VOTE_NOT_FOUND = "Vote not found"
    NOTIFICATION_NOT_FOUND = "Notification not found"
    DUPLICATE_RECORD = "A record with these values already exists"


# Application Constants
class AppConstants:
    # Pagination
    DEFAULT_PAGE = 1
    DEFAULT_PAGE_SIZE = 20
    MAX_PAGE_SIZE = 100
    THREAD_PAGE_SIZE = 20

    # File uploads
    MAX_FILE_SIZE_MB = 10
    ALLOWED_FILE_TYPES = {
        "image/jpeg": ".jpg",
        "image/png": ".png",
        "image/gif": ".gif",
        "application/pdf": ".pdf",
        "application/msword": ".doc",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document": ".docx",
    }

    # Auth
    REFRESH_COOKIE_NAME = "refresh_token"
    REFRESH_COOKIE_PATH = "/api/auth/refresh-token"
    REFRESH_COOKIE_MAX_AGE = 7 * 24 * 60 * 60

    # Background jobs
    REMINDER_CHECK_INTERVAL_MINUTES = 15
    CHORE_DUE_SOON_HOURS = 24

    # Financial
    CURRENCY_DECIMAL_PLACES = 2
