from django.dispatch import Signal

# Sent by the ledger inside the payment transaction once a record's
# remaining balance reaches zero or below.
# kwargs: record, enrollment_id, recorded_by
balance_settled = Signal()
