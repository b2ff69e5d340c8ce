"""Shared identifiers for ticketing tests"""

# Venues
VENUE_ID = 10
OTHER_VENUE_ID = 20

# Events
EVENT_ID = 1
OTHER_EVENT_ID = 2

# Users
BUYER_ID = 1
OTHER_BUYER_ID = 2
SCANNER_ID = 50

# Payments
PAYMENT_REFERENCE = 'pi_test_buyer_event_1'
OTHER_PAYMENT_REFERENCE = 'pi_test_other_buyer_event_1'
