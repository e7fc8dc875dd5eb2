#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

"""
This module implements BSON UTC datetimes, encoded as the signed 64-bit count of milliseconds since the Unix epoch.

Naive datetimes are taken as UTC. Precision below a millisecond is dropped (rounding towards the past) and decoded
values are always timezone-aware.

>>> se = Serializer.build_bytes_serializer()
>>> encode_datetime(se, datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc))  # writes e803000000000000
>>> encode_datetime(se, datetime(1969, 12, 31, 23, 59, 59, 999000))  # writes ffffffffffffffff
>>> bytes(se.finalize()).hex()
'e803000000000000ffffffffffffffff'

>>> de = Deserializer.build_bytes_deserializer(bytes.fromhex('e803000000000000ffffffffffffffff'))
>>> decode_datetime(de).isoformat()
'1970-01-01T00:00:01+00:00'
>>> decode_datetime(de).isoformat()
'1969-12-31T23:59:59.999000+00:00'
>>> de.finalize()
"""

from datetime import datetime, timedelta, timezone

from bsonbuilder.serialization import BadDataError, Deserializer, Serializer

from .int import decode_int, encode_int

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def datetime_to_millis(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    delta = value - _EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def millis_to_datetime(millis: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=millis)


def encode_datetime(serializer: Serializer, value: datetime) -> None:
    encode_int(serializer, datetime_to_millis(value), length=8, signed=True)


def decode_datetime(deserializer: Deserializer) -> datetime:
    millis = decode_int(deserializer, length=8, signed=True)
    try:
        return millis_to_datetime(millis)
    except OverflowError as e:
        raise BadDataError(f'datetime out of range: {millis}') from e
