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

The Parse object types: `ParseObject`, the base class for your own classes
of stored objects, `ParseUser` for user accounts, and the value classes for
Parse's tagged data types.

"""

from parseobjects import fields
from parseobjects.dataobject import DataObject


DELETE_OP = {'__op': 'Delete'}


class GeoPoint(DataObject):

    """A latitude and longitude pair."""

    parse_type = fields.Constant('GeoPoint', api_name=fields.TYPE_KEY)
    latitude   = fields.Field()
    longitude  = fields.Field()

    def __init__(self, latitude=None, longitude=None, **kwargs):
        super(GeoPoint, self).__init__(**kwargs)
        if latitude is not None:
            self.latitude = latitude
        if longitude is not None:
            self.longitude = longitude


class Relation(DataObject):

    """The description of a relation field as returned by Parse: the class
    of objects the relation holds."""

    parse_type = fields.Constant('Relation', api_name=fields.TYPE_KEY)
    class_name = fields.Field(api_name='className')


class ParseObject(DataObject):

    """An object stored in a Parse class.

    Declare a subclass for each Parse class your application uses, with its
    data attributes as fields. The Parse class name is the name of your
    Python class, unless you give the subclass a `class_name` attribute:

    >>> class GameScore(ParseObject):
    ...     score       = fields.Field()
    ...     player_name = fields.Field(api_name='playerName')
    ...     player      = fields.Pointer('Player')
    ...     played_at   = fields.Date(api_name='playedAt')
    ...

    The `object_id`, `created_at` and `updated_at` attributes are assigned
    by the server and are never sent in requests.

    """

    class_name = None

    object_id  = fields.Field(api_name='objectId', serialize=False)
    created_at = fields.Date(api_name='createdAt', serialize=False)
    updated_at = fields.Date(api_name='updatedAt', serialize=False)
    acl        = fields.Field(api_name='ACL')

    @classmethod
    def get_class_name(cls):
        """Returns the name of the Parse class holding objects of this
        class."""
        return cls.class_name or cls.__name__

    @classmethod
    def pointer_fields(cls):
        return [field for field in cls.fields.values()
                if isinstance(field, fields.Pointer)]

    def to_pointer(self):
        """Returns the pointer to this object, for saving as a reference in
        another object."""
        if not self.object_id:
            raise ValueError('Cannot make a pointer to %r with no object id' % (self,))
        return {
            fields.TYPE_KEY: 'Pointer',
            'className': self.get_class_name(),
            'objectId': self.object_id,
        }

    def to_body(self):
        """Encodes the object as the body of a request to save it.

        Only the declared fields that serialize are included. A field that
        had a value when the object was loaded or last saved, but has since
        been set to `None`, is sent as a ``Delete`` operation so that the
        server removes it too.

        """
        body = {}
        for field in self.fields.values():
            if not field.serialize:
                continue
            value = getattr(self, field.attrname, None)
            if value is None:
                if self.api_data.get(field.api_name) is not None:
                    body[field.api_name] = dict(DELETE_OP)
                continue
            body[field.api_name] = field.encode(value)
        return body

    def update_from_saved(self, body, data):
        """Records a successful save of this object.

        Parameter `body` is the request body that was saved and `data` is
        the server's response, which holds only the server-assigned values
        such as ``objectId`` and ``updatedAt``. Field values the caller set
        directly are kept.

        """
        for key, value in body.items():
            if value == DELETE_OP:
                self.api_data.pop(key, None)
            else:
                self.api_data[key] = value
        self.api_data.update(data)

        # Forget decoded values the server just replaced.
        for field in self.fields.values():
            if field.api_name in data:
                self.__dict__.pop(field.attrname, None)


class FacebookAuthData(DataObject):
    id              = fields.Field()
    access_token    = fields.Field()
    expiration_date = fields.Date()


class TwitterAuthData(DataObject):
    id                = fields.Field()
    screen_name       = fields.Field()
    consumer_key      = fields.Field()
    consumer_secret   = fields.Field()
    auth_token        = fields.Field()
    auth_token_secret = fields.Field()


class AnonymousAuthData(DataObject):
    id = fields.Field()


class AuthData(DataObject):

    """The third party accounts linked to a user."""

    facebook  = fields.Object(FacebookAuthData)
    twitter   = fields.Object(TwitterAuthData)
    anonymous = fields.Object(AnonymousAuthData)


class ParseUser(ParseObject):

    """A Parse user account.

    Subclass `ParseUser` to declare the extra fields your application keeps
    on its users. Users are stored in the special ``_User`` class and have
    their own operations on `ParseClient`, such as `sign_up()` and
    `log_in()`.

    """

    class_name = '_User'

    username       = fields.Field()
    password       = fields.Field()
    email          = fields.Field()
    email_verified = fields.Field(api_name='emailVerified', serialize=False)
    auth_data      = fields.Object(AuthData, api_name='authData', serialize=False)


class UserSession(DataObject):

    """A logged in user and the session token that authenticates requests
    made on their behalf."""

    user          = fields.Object(ParseUser)
    session_token = fields.Field(api_name='sessionToken')
