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

Querying support: `Constraint` predicates for building where clauses, and
the `QueryResult` classes that pages of query results decode into.

"""

import simplejson as json

from parseobjects import fields
from parseobjects.dataobject import DataObject, DataObjectMetaclass


class Constraint(object):

    """A query predicate on one field.

    Use a `Constraint` as the value for a field in a where clause to match
    objects more precisely than by equality. The arguments correspond to the
    Parse query operators:

    ==========================  ===============
    Argument                    Operator
    ==========================  ===============
    `less_than`                 ``$lt``
    `less_than_or_equal_to`     ``$lte``
    `greater_than`              ``$gt``
    `greater_than_or_equal_to`  ``$gte``
    `not_equal_to`              ``$ne``
    `in_`                       ``$in``
    `not_in`                    ``$nin``
    `all`                       ``$all``
    `exists`                    ``$exists``
    `select`                    ``$select``
    `dont_select`               ``$dontSelect``
    `regex`                     ``$regex``
    `regex_options`             ``$options``
    ==========================  ===============

    Only the operators given are sent. For example, to find high scores
    from last week:

    >>> where = {
    ...     'score': Constraint(greater_than_or_equal_to=1000),
    ...     'played_at': Constraint(greater_than=last_week),
    ... }
    >>> client.get_objects(GameScore, where=where)

    """

    operators = (
        ('less_than',                '$lt'),
        ('less_than_or_equal_to',    '$lte'),
        ('greater_than',             '$gt'),
        ('greater_than_or_equal_to', '$gte'),
        ('not_equal_to',             '$ne'),
        ('in_',                      '$in'),
        ('not_in',                   '$nin'),
        ('all',                      '$all'),
        ('exists',                   '$exists'),
        ('select',                   '$select'),
        ('dont_select',              '$dontSelect'),
        ('regex',                    '$regex'),
        ('regex_options',            '$options'),
    )

    def __init__(self, less_than=None, less_than_or_equal_to=None,
                 greater_than=None, greater_than_or_equal_to=None,
                 not_equal_to=None, in_=None, not_in=None, all=None,
                 exists=None, select=None, dont_select=None, regex=None,
                 regex_options=None):
        self.less_than = less_than
        self.less_than_or_equal_to = less_than_or_equal_to
        self.greater_than = greater_than
        self.greater_than_or_equal_to = greater_than_or_equal_to
        self.not_equal_to = not_equal_to
        self.in_ = in_
        self.not_in = not_in
        self.all = all
        self.exists = exists
        self.select = select
        self.dont_select = dont_select
        self.regex = regex
        self.regex_options = regex_options

    def __repr__(self):
        return 'Constraint(%s)' % ', '.join('%s=%r' % (attr, getattr(self, attr))
            for attr, op in self.operators if getattr(self, attr) is not None)

    def to_dict(self):
        """Encodes the constraint as a dictionary of query operators."""
        data = {}
        for attr, op in self.operators:
            value = getattr(self, attr)
            if value is not None:
                data[op] = fields.encode_value(value)
        return data


def encode_where(cls, where):
    """Encodes a where clause for a query of `cls` objects as JSON.

    Keys of `where` that are attribute names of `cls` fields are translated
    to the fields' names in the API; other keys are sent as given. Values are
    converted with `fields.encode_value()`, so they can be dates, objects to
    match by pointer, or `Constraint` instances.

    """
    data = {}
    for key, value in where.items():
        field = cls.fields.get(key)
        if field is not None:
            key = field.api_name
        data[key] = fields.encode_value(value)
    return json.dumps(data, separators=(',', ':'))


class SequenceProxy(object):

    """An abstract class implementing the sequence protocol by proxying it to
    an instance attribute.

    `SequenceProxy` instances act like sequences by forwarding all sequence
    method calls to their `results` attributes. The `results` attribute
    should be a list or some other that implements the sequence protocol.

    """

    def make_sequence_method(methodname):
        """Makes a new function that proxies calls to `methodname` to the
        `results` attribute of the instance on which the function is called as
        an instance method."""
        def seqmethod(self, *args, **kwargs):
            # Proxy these methods to self.results.
            return getattr(self.results, methodname)(*args, **kwargs)
        seqmethod.__name__ = methodname
        return seqmethod

    __len__      = make_sequence_method('__len__')
    __getitem__  = make_sequence_method('__getitem__')
    __iter__     = make_sequence_method('__iter__')
    __reversed__ = make_sequence_method('__reversed__')
    __contains__ = make_sequence_method('__contains__')

    del make_sequence_method


class ResultsOf(DataObjectMetaclass):

    """Metaclass defining a `QueryResult` containing a page of some other
    class's instances.

    Unlike most metaclasses, this metaclass can be called directly to define
    new `QueryResult` classes that contain objects of a specified other
    class, like so:

    >>> ResultsOfGameScore = ResultsOf(GameScore)

    This is equivalent to defining ``ResultsOfGameScore`` yourself:

    >>> class ResultsOfGameScore(QueryResult):
    ...     results = fields.List(fields.Object(GameScore))

    """

    _subclasses = {}
    _baseclass = None

    def __new__(cls, name, bases=None, attrs=None):
        """Creates a new `QueryResult` subclass.

        If `bases` and `attrs` are specified, as in a regular subclass
        declaration, a new class is created as per the specified settings.

        If only `name` is specified, that value is used as a reference to a
        `ParseObject` class to which the new `QueryResult` class is bound.
        The `name` parameter can be either a name or a `ParseObject` class,
        as when declaring a `parseobjects.fields.Object` field.

        """
        direct = attrs is None
        if direct:
            # Don't bother making a new subclass if we already made one for
            # this target.
            if name in cls._subclasses:
                return cls._subclasses[name]

            entryclass = name
            if callable(entryclass):
                name = cls.__name__ + entryclass.__name__
            else:
                name = cls.__name__ + entryclass

            bases = (cls._baseclass,)
            attrs = {
                'results': fields.List(fields.Object(entryclass)),
            }

        newcls = super(ResultsOf, cls).__new__(cls, name, bases, attrs)

        # Save the result for later direct invocations.
        if direct:
            cls._subclasses[entryclass] = newcls
        elif cls._baseclass is None:
            cls._baseclass = newcls

        return newcls


class QueryResult(SequenceProxy, DataObject, metaclass=ResultsOf):

    """A page of objects matching a query.

    `results` holds the matched objects and `count` the total number of
    objects matching the query, which may be more than are in this page.
    The `QueryResult` itself acts as a sequence of its results.

    The results of a plain `QueryResult` are not decoded at all. Use
    `ResultsOf` to make a `QueryResult` class whose results are decoded into
    instances of your `ParseObject` class:

    >>> scores = ResultsOf(GameScore).from_dict(data)
    >>> scores[0].score
    1337

    """

    results = fields.List(fields.Field())
    count   = fields.Field()

    def __repr__(self):
        return '<%s count=%r results=%r>' % (type(self).__name__, self.count,
                                             self.results)


def encode_order(cls, order):
    """Encodes the sort order for a query of `cls` objects.

    Parameter `order` is a field name, or a list of them, each optionally
    prefixed with ``-`` for descending order. Attribute names of `cls`
    fields are translated to the fields' names in the API.

    """
    if isinstance(order, str):
        order = order.split(',')
    keys = []
    for key in order:
        key = key.strip()
        prefix = ''
        if key.startswith('-'):
            prefix, key = '-', key[1:]
        field = cls.fields.get(key)
        if field is not None:
            key = field.api_name
        keys.append(prefix + key)
    return ','.join(keys)
