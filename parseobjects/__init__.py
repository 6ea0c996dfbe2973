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

parseobjects are real subclassable Python objects on which you can build a
client for an application stored in Parse.

parseobjects provides coding and transfer between Python objects and the
Parse REST API. You define each Parse class your application uses as a
`ParseObject` subclass with its properties declared as fields, then save,
fetch, query and delete instances through a `ParseClient`.

parseobjects have:

* declarative conversion between Python values and Parse's JSON format,
  including its dates, byte strings, pointers, relations and geo points

* HTTP support through the `httplib2` library

* structured `ParseError` exceptions for failed requests


Example
=======

    >>> from parseobjects import ParseClient, ParseObject, Constraint, fields
    >>> class Player(ParseObject):
    ...     name = fields.Field()
    ...
    >>> class GameScore(ParseObject):
    ...     score     = fields.Field()
    ...     player    = fields.Pointer(Player)
    ...     played_at = fields.Date(api_name='playedAt')
    ...
    >>> client = ParseClient('appid', 'restapikey')
    >>> sean = client.create_object(Player(name='Sean Plott'))
    >>> score = client.create_object(GameScore(score=1337, player=sean))
    >>> high = client.get_objects(GameScore,
    ...     where={'score': Constraint(greater_than=1000)}, order='-score')
    >>> [s.score for s in high]
    [1337]

"""

__version__ = '1.0'
__author__ = 'The parseobjects developers'

from parseobjects.dataobject import DataObject
import parseobjects.fields as fields
from parseobjects.objects import (AuthData, GeoPoint, ParseObject, ParseUser,
                                  Relation, UserSession)
from parseobjects.query import Constraint, QueryResult, ResultsOf
from parseobjects.http import ParseClient, ParseError

__all__ = ('ParseClient', 'ParseError', 'ParseObject', 'ParseUser',
           'UserSession', 'AuthData', 'GeoPoint', 'Relation', 'Constraint',
           'QueryResult', 'ResultsOf', 'DataObject', 'fields')
