"""
Command tokens for the ALPS sealer serial protocol.

Protocol framing: <TOKEN>[ARGS]\\r
Replies carry no terminator; the device answers with a short ASCII token
("ok", "er", a hex status byte or a plain number).

Tokens ending in '=' (and the single-letter setters A/B) take an argument
that is appended directly after the token.
"""

STATUS = "?"
INITIALIZE = "I"
START_SEAL = "S"

SET_TEMPERATURE = "A"
SET_SEAL_TIME = "B"
SET_SEAL_FORCE = "PS="
SET_SEAL_LENGTH = "L="
SET_DRIVE_ON = "DO="

GET_SET_TEMPERATURE = "C"
GET_ACTUAL_TEMPERATURE = "F"
GET_SEAL_TIME = "D"
GET_SEAL_FORCE = "PS"
GET_SEAL_LENGTH = "SL"
GET_DRIVE_ON = "DO"

FORCE_SENSOR_ON = "FS=1"
FORCE_SENSOR_OFF = "FS=0"
SHUTTLE_IN = "SI"
SHUTTLE_OUT = "SO"
VERSION = "V"

RESPONSE_OK = "ok"
RESPONSE_ERROR = "er"
