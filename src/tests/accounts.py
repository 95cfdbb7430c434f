"""Account identities and clock values shared by the test modules."""

OWNER = "0xowner"
OPERATOR = "0xoperator"
COURIER = "0xcourier"
OTHER_COURIER = "0xcourier2"
SENDER = "0xsender"
RECIPIENT = "0xrecipient"
STRANGER = "0xstranger"

T0 = 1_700_000_000
