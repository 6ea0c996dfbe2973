# Copyright (c) 2009-2010 Six Apart Ltd.
# All rights reserved.
#
# Redistribution and use in source and binary forms, with or without
# modification, are permitted provided that the following conditions are met:
#
# * Redistributions of source code must retain the above copyright notice,
#   this list of conditions and the following disclaimer.
#
# * Redistributions in binary form must reproduce the above copyright notice,
#   this list of conditions and the following disclaimer in the documentation
#   and/or other materials provided with the distribution.
#
# * Neither the name of Six Apart Ltd. nor the names of its contributors may
#   be used to endorse or promote products derived from this software without
#   specific prior written permission.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS "AS IS"
# AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT LIMITED TO, THE
# IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS FOR A PARTICULAR PURPOSE
# ARE DISCLAIMED. IN NO EVENT SHALL THE COPYRIGHT HOLDER OR CONTRIBUTORS BE
# LIABLE FOR ANY DIRECT, INDIRECT, INCIDENTAL, SPECIAL, EXEMPLARY, OR
# CONSEQUENTIAL DAMAGES (INCLUDING, BUT NOT LIMITED TO, PROCUREMENT OF
# SUBSTITUTE GOODS OR SERVICES; LOSS OF USE, DATA, OR PROFITS; OR BUSINESS
# INTERRUPTION) HOWEVER CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN
# CONTRACT, STRICT LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE)
# ARISING IN ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""

Fields are class attributes for `ParseObject` subclasses that provide data
coding functionality for your properties.

Besides plain values, the Parse REST API marks its special types (dates,
byte strings, pointers to other objects, relations and geographic points)
as JSON objects tagged with a ``__type`` key. The `Date`, `Bytes`,
`Pointer`, `Relation` and `GeoPoint` fields code between those tagged
objects and Python values.

"""

import base64
import binascii
from datetime import datetime, timezone

import parseobjects.dataobject


TYPE_KEY = '__type'


class Field(object):

    """A property for encoding object attributes as dictionary values and
    decoding dictionary values into object attributes.

    Declare a `Field` instance for each attribute of a `DataObject` that
    should be encoded to or decoded from a dictionary.

    Use a `Field` instance directly for simple `DataObject` attributes that
    can be the same type as their dictionary values. That is, use `Field`
    fields for strings, numbers, boolean values, and free-form arrays and
    objects. If your attribute data does need converted, use one of the
    `Field` subclasses from the `parseobjects.fields` module to encode and
    decode your data as appropriate.

    If your attribute needs converted specially, override the `decode()` and
    `encode()` methods in a new subclass of `Field`.

    """

    def __init__(self, api_name=None, default=None, serialize=True):
        """Sets the field's matching deserialization field and default value.

        Optional parameter `api_name` is the key of this field's matching
        value in a dictionary. If not given, the attribute name of the field
        when its class was defined is used. (The attribute of the object
        containing the decoded value will always be the attribute name of the
        field as declared.)

        Optional parameter `default` is the default value to use for this
        attribute when the dictionary to decode does not contain a value.
        `default` can be a value or callable function. If `default` is a
        callable function, it is called when a dictionary is decoded into an
        instance, is passed the object to decode into, and should return the
        default value of the attribute.

        Optional parameter `serialize` says whether the field is written into
        the bodies of requests that save an object. Values the server
        maintains itself, such as object ids and timestamps, are read from
        responses but never sent back.

        """
        self.api_name = api_name
        self.default  = default
        self.serialize = serialize

    def install(self, attrname, cls):
        self.attrname = attrname
        if self.api_name is None:
            self.api_name = attrname
        # attrname has to be set before of_cls or Constant fields break.
        self.of_cls = cls

    def __get__(self, obj, cls):
        """Returns the field's value on the given object instance, or the
        field's default value if no value for the field is available.

        Note the field's value will be decoded from API data if necessary,
        raising any exceptions that the field's `decode()` method may raise.

        """
        if obj is None:
            # Yield the real field instance when gotten through the class.
            return self

        if self.attrname not in obj.__dict__:
            try:
                value = obj.api_data[self.api_name]
            except KeyError:
                if callable(self.default):
                    value = self.default(obj)
                else:
                    value = self.default
            else:
                value = self.decode(value)
            # Store the value so we need decode it only once.
            obj.__dict__[self.attrname] = value

        return obj.__dict__[self.attrname]

    def __set__(self, obj, value):
        obj.__dict__[self.attrname] = value

    def __delete__(self, obj):
        # Delete both the instance and API data, so we'll get a real
        # attribute miss next time and return the field's default.
        obj.__dict__.pop(self.attrname, None)
        obj.api_data.pop(self.api_name, None)

    def decode_default(self):
        if callable(self.default):
            return self.default()
        return self.default

    def decode(self, value):
        """Decodes a dictionary value into a `DataObject` attribute value.

        This implementation returns the `value` parameter unchanged.

        """
        return value

    def encode(self, value):
        """Encodes a `DataObject` attribute value into a dictionary value.

        This implementation returns the `value` parameter unchanged.

        """
        return value


class Constant(Field):

    """A field for data that always has a certain value for all instances of
    the owning class.

    The Parse value classes use this field for their ``__type`` tag, which
    also registers them so `DataObject.subclass_with_constant_field()` can
    find the class for a tagged value.

    """

    def __init__(self, value, **kwargs):
        """Sets the field's constant value to parameter `value`."""
        super(Constant, self).__init__(**kwargs)
        self.value = value

    def install(self, attrname, cls):
        """Records the class that owns this field, and registers the class by
        this constant field's value."""
        super(Constant, self).install(attrname, cls)

        cf = parseobjects.dataobject.classes_by_constant_field
        # Register the class itself, not its name.
        cf.setdefault(self.attrname, {})[self.value] = cls

    def __get__(self, obj, cls):
        if obj is None:
            # Yield the real field instance when gotten through the class.
            return self
        # Since it's a constant, always return the same value.
        return self.value

    def __set__(self, obj, value):
        # If it's the correct value, do nothing. Else, raise an exception.
        if value != self.value:
            raise ValueError('Value %r is not expected value %r'
                % (value, self.value))

    def decode(self, value):
        if value != self.value:
            raise ValueError('Value %r is not expected value %r'
                % (value, self.value))
        return self.value

    def encode(self, value):
        # Don't even bother caring what we were given; it's our constant.
        return self.value


class List(Field):

    """A field representing a homogeneous list of data.

    The elements of the list are decoded through another field specified when
    the `List` is declared.

    """

    def __init__(self, fld, **kwargs):
        """Sets the type of field representing the content of the list.

        Parameter `fld` is another field instance representing the list's
        content. For instance, if the field were to represent a list of
        timestamps, `fld` would be a `Date` instance.

        """
        super(List, self).__init__(**kwargs)
        self.fld = fld

    def install(self, attrname, cls):
        super(List, self).install(attrname, cls)

        # Make sure our content field knows its owner too.
        self.fld.install(attrname, cls)

    def decode(self, value):
        if value is None:
            return self.decode_default()
        return [self.fld.decode(v) for v in value]

    def encode(self, value):
        return [self.fld.encode(v) for v in value]


class Dict(List):

    """A field representing a homogeneous mapping of data.

    The elements of the mapping are decoded through another field specified
    when the `Dict` is declared.

    """

    def decode(self, value):
        if value is None:
            return self.decode_default()
        return dict((k, self.fld.decode(v)) for k, v in value.items())

    def encode(self, value):
        return dict((k, self.fld.encode(v)) for k, v in value.items())


class AcceptsStringCls(object):
    """Mixin for fields with a ``cls`` attribute that can either be a
    ``DataObject`` subclass or a string name of a ``DataObject`` subclass (to
    allow forward references)."""

    def get_cls(self):
        cls = self.__dict__['cls']
        if not callable(cls):
            cls = parseobjects.dataobject.find_by_name(cls)
        return cls

    def set_cls(self, cls):
        self.__dict__['cls'] = cls

    cls = property(get_cls, set_cls)


class Object(AcceptsStringCls, Field):

    """A field representing a nested `DataObject`."""

    def __init__(self, cls, **kwargs):
        """Sets the the `DataObject` class the field represents.

        Parameter `cls` is the `DataObject` class representing the nested
        objects. `cls` may also be the name of a class, so that classes can
        be referenced before they are declared.

        """
        super(Object, self).__init__(**kwargs)
        self.cls = cls

    def decode(self, value):
        """Decodes the dictionary value into an instance of the `DataObject`
        class the field references."""
        if value is None:
            return self.decode_default()
        return self.cls.from_dict(value)

    def encode(self, value):
        return value.to_dict()


class Date(Field):

    """A field representing a timestamp.

    Parse returns an object's own ``createdAt`` and ``updatedAt`` times as
    bare ISO 8601 strings, and every other date as a tagged object::

        {"__type": "Date", "iso": "2011-08-21T18:02:52.249Z"}

    Both forms decode into a `datetime` with UTC tzinfo. Dates are always
    encoded in the tagged form.

    """

    parse_type = 'Date'
    dateformat = '%Y-%m-%dT%H:%M:%S.%fZ'
    dateformats = (dateformat, '%Y-%m-%dT%H:%M:%SZ')
    utc = timezone.utc

    def decode(self, value):
        if value is None:
            return self.decode_default()
        if isinstance(value, dict):
            if value.get(TYPE_KEY) != self.parse_type:
                raise TypeError('Value to decode %r is not a Parse date' % (value,))
            value = value.get('iso')
        for dateformat in self.dateformats:
            try:
                return datetime.strptime(value, dateformat).replace(tzinfo=self.utc)
            except (TypeError, ValueError):
                continue
        raise TypeError('Value to decode %r is not a valid date time stamp' % (value,))

    def encode(self, value):
        """Encodes a `datetime` into a tagged Parse date.

        Naive `datetime` instances are taken to be in UTC already. The
        timestamp keeps millisecond precision, as the Parse API does.

        """
        if not isinstance(value, datetime):
            raise TypeError('Value to encode %r is not a datetime' % (value,))
        if value.tzinfo is not None:
            value = value.astimezone(self.utc)
        iso = '%s.%03dZ' % (value.strftime('%Y-%m-%dT%H:%M:%S'),
                            value.microsecond // 1000)
        return {TYPE_KEY: self.parse_type, 'iso': iso}


class Bytes(Field):

    """A field representing a byte string, sent base64 encoded."""

    parse_type = 'Bytes'

    def decode(self, value):
        if value is None:
            return self.decode_default()
        if not isinstance(value, dict) or value.get(TYPE_KEY) != self.parse_type:
            raise TypeError('Value to decode %r is not Parse bytes' % (value,))
        try:
            return base64.b64decode(value['base64'], validate=True)
        except (KeyError, TypeError, binascii.Error):
            raise TypeError('Value to decode %r has no valid base64 data' % (value,))

    def encode(self, value):
        if not isinstance(value, (bytes, bytearray)):
            raise TypeError('Value to encode %r is not a byte string' % (value,))
        return {
            TYPE_KEY: self.parse_type,
            'base64': base64.b64encode(bytes(value)).decode('ascii'),
        }


class Pointer(Object):

    """A field representing a reference to another `ParseObject`.

    A pointer is sent as the other object's class name and object id. When
    read back, it decodes into an instance of the field's class holding only
    its `object_id`, unless the request asked the server to include the
    referenced objects, in which case the whole object is decoded.

    """

    parse_types = ('Pointer', 'Object')

    def decode(self, value):
        if value is None:
            return self.decode_default()
        if not isinstance(value, dict) or value.get(TYPE_KEY) not in self.parse_types:
            raise TypeError('Value to decode %r is not a Parse pointer' % (value,))
        return self.cls.from_dict(value)

    def encode(self, value):
        return value.to_pointer()


class Tagged(Field):

    """A field representing one of the Parse value classes, such as
    `GeoPoint`, that declare their ``__type`` tag with a `Constant` field
    named ``parse_type``."""

    parse_type = None

    def __init__(self, parse_type=None, **kwargs):
        super(Tagged, self).__init__(**kwargs)
        if parse_type is not None:
            self.parse_type = parse_type

    @property
    def cls(self):
        return parseobjects.dataobject.DataObject.subclass_with_constant_field(
            'parse_type', self.parse_type)

    def decode(self, value):
        if value is None:
            return self.decode_default()
        if not isinstance(value, dict) or value.get(TYPE_KEY) != self.parse_type:
            raise TypeError('Value to decode %r is not a Parse %s'
                % (value, self.parse_type))
        return self.cls.from_dict(value)

    def encode(self, value):
        return value.to_dict()


class GeoPoint(Tagged):

    """A field representing a latitude and longitude pair."""

    parse_type = 'GeoPoint'


class Relation(Tagged):

    """A field representing a many-to-many relation to other objects.

    Relations are never written when an object is saved; add and remove
    members with `ParseClient.add_to_relation()` and
    `ParseClient.remove_from_relation()` instead.

    """

    parse_type = 'Relation'

    def __init__(self, **kwargs):
        kwargs['serialize'] = False
        super(Relation, self).__init__(**kwargs)


def encode_value(value):
    """Converts a free-form value into its Parse wire form.

    Dates, byte strings and `ParseObject` instances (as pointers) are
    tagged, and objects with a ``to_dict()`` method such as `Constraint` or
    `GeoPoint` are encoded through it. Lists and dictionaries are converted
    recursively.

    """
    if isinstance(value, datetime):
        return Date().encode(value)
    if isinstance(value, (bytes, bytearray)):
        return Bytes().encode(value)
    if hasattr(value, 'to_pointer'):
        return value.to_pointer()
    if hasattr(value, 'to_dict'):
        return encode_value(value.to_dict())
    if isinstance(value, dict):
        return dict((k, encode_value(v)) for k, v in value.items())
    if isinstance(value, (list, tuple, set, frozenset)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value):
    """Converts a free-form value from Parse, such as a cloud function's
    result, into Python values.

    Tagged dates and byte strings become `datetime` and `bytes` values, and
    tagged values with a registered value class become instances of it.
    Pointers and other tagged values are left as dictionaries.

    """
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    if not isinstance(value, dict):
        return value

    parse_type = value.get(TYPE_KEY)
    if parse_type == Date.parse_type:
        return Date().decode(value)
    if parse_type == Bytes.parse_type:
        return Bytes().decode(value)
    if parse_type is not None:
        try:
            return Tagged(parse_type).cls.from_dict(value)
        except ValueError:
            return value
    return dict((k, decode_value(v)) for k, v in value.items())
