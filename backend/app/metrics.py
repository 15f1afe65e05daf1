from prometheus_client import Counter

INQUIRY_SUBMISSIONS = Counter(
    "rarefind_inquiry_submissions_total",
    "Consultation submissions by terminal outcome",
    ["outcome"],
)
INQUIRY_STORE_ATTEMPTS = Counter(
    "rarefind_inquiry_store_attempts_total",
    "Create-inquiry calls against the store",
    ["result"],
)
NOTIFICATION_DISPATCHES = Counter(
    "rarefind_notification_dispatches_total",
    "Best-effort notification function calls",
    ["result"],
)
EMAILS_SENT = Counter(
    "rarefind_emails_sent_total",
    "Emails handed to the email provider",
    ["kind", "result"],
)
