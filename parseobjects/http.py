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

`ParseClient` issues the requests of the Parse REST API and codes the
objects sent and received through the `parseobjects` object model.

"""

from http import HTTPStatus
from http.client import HTTPException
import logging
import os
from urllib.parse import quote, urlencode, urljoin

import httplib2
import simplejson as json

from parseobjects import fields
from parseobjects.objects import ParseUser, UserSession
from parseobjects.query import ResultsOf, encode_order, encode_where

userAgent = httplib2.Http()

log = logging.getLogger('parseobjects.http')


BASE_URL = 'https://api.parse.com/1/'

# POST to create, GET to query
CLASS_URL = 'classes/%s'
# PUT to update, GET to retrieve, DELETE to delete
CLASS_OBJECT_URL = 'classes/%s/%s'
# POST to sign up, GET to query
USER_URL = 'users'
# PUT to update, GET to retrieve, DELETE to delete
USER_OBJECT_URL = 'users/%s'
# GET to log in
LOGIN_URL = 'login'
# POST to request a password reset email
PASSWORD_RESET_URL = 'requestPasswordReset'
# POST to call a cloud function
FUNCTION_URL = 'functions/%s'
# POST to track analytics
EVENT_URL = 'events/%s'
APP_OPENED_EVENT = 'AppOpened'

APP_ID_HEADER = 'X-Parse-Application-Id'
REST_API_KEY_HEADER = 'X-Parse-REST-API-Key'
SESSION_TOKEN_HEADER = 'X-Parse-Session-Token'


def quote_path(value):
    return quote(str(value), safe='')


class ParseError(HTTPException):

    """An HTTPException thrown when the Parse API does not respond with the
    expected success status.

    Besides the message, the exception carries the `url` requested, the HTTP
    `status` and `reason` of the response, and the Parse error `code` and
    `error` message when the response body held them. Parse reports errors
    in its bodies as::

        {"code": 105, "error": "invalid field name: b!ng"}

    """

    def __init__(self, message, url=None, status=None, reason=None,
                 code=None, error=None):
        super(ParseError, self).__init__(message)
        self.url = url
        self.status = status
        self.reason = reason
        self.code = code
        self.error = error


class ParseClient(object):

    """A client for the Parse REST API of one application.

    Create a client with your application's id and REST API key:

    >>> client = ParseClient('appid', 'restapikey')
    >>> score = client.create_object(GameScore(score=1337))
    >>> score.object_id
    'Ed1nuqPvcm'

    Optional parameter `base_url` is the root URL of the API, for servers
    other than api.parse.com. Optional parameter `http` is the user agent
    object to use for requests, and should be compatible with
    `httplib2.Http` instances; by default a shared `httplib2.Http` is used.

    """

    content_types = ('application/json',)

    class NotFound(ParseError):
        """A ParseError thrown when the server reports that the requested
        object or endpoint was not found.

        This exception corresponds to the HTTP status code 404.

        """
        pass

    class Unauthorized(ParseError):
        """A ParseError thrown when the server did not accept the
        application's credentials.

        This exception corresponds to the HTTP status code 401.

        """
        pass

    class Forbidden(ParseError):
        """A ParseError thrown when the server reports that the client, as
        authenticated, is not allowed the requested operation.

        This exception corresponds to the HTTP status code 403.

        """
        pass

    class RequestError(ParseError):
        """A ParseError thrown when the server reports an error in the
        client's request, such as an invalid field name or a failed login.

        This exception corresponds to the HTTP status code 400.

        """
        pass

    class ServerError(ParseError):
        """A ParseError thrown when the server reports an unexpected error.

        This exception corresponds to the HTTP status codes 500 and up.

        """
        pass

    class BadResponse(ParseError):
        """A ParseError thrown when the client receives some other response
        than the one expected."""
        pass

    def __init__(self, app_id, rest_api_key, base_url=None, http=None):
        if not app_id or not rest_api_key:
            raise ValueError('An application id and REST API key are required')
        self.app_id = app_id
        self.rest_api_key = rest_api_key
        if base_url is None:
            base_url = BASE_URL
        if not base_url.endswith('/'):
            base_url += '/'
        self.base_url = base_url
        if http is None:
            http = userAgent
        self.http = http

    @classmethod
    def from_environ(cls, environ=None, http=None):
        """Creates a client configured from environment variables.

        The application id and REST API key are read from
        ``PARSE_APPLICATION_ID`` and ``PARSE_REST_API_KEY``, and the API's
        root URL from ``PARSE_SERVER_URL`` if it is set.

        """
        if environ is None:
            environ = os.environ
        try:
            app_id = environ['PARSE_APPLICATION_ID']
            rest_api_key = environ['PARSE_REST_API_KEY']
        except KeyError as exc:
            raise ValueError('Environment variable %s is not set' % exc.args[0])
        return cls(app_id, rest_api_key, base_url=environ.get('PARSE_SERVER_URL'),
                   http=http)

    def get_request(self, path, method='GET', query=None, body=None,
                    session_token=None):
        """Returns the parameters for requesting the given API path as a
        dictionary of keyword arguments suitable for passing to
        `httplib2.Http.request()`.

        Optional parameter `query` is a sequence of query parameters for the
        URL. Optional parameter `body` is the data to send as the JSON body of
        the request. Optional parameter `session_token` authenticates the
        request as a logged in user.

        """
        url = urljoin(self.base_url, path)
        if query:
            url = '%s?%s' % (url, urlencode(query))

        headers = {
            'accept': ', '.join(self.content_types),
            APP_ID_HEADER: self.app_id,
            REST_API_KEY_HEADER: self.rest_api_key,
        }
        if session_token is not None:
            headers[SESSION_TOKEN_HEADER] = session_token

        # Use 'uri' because httplib2.request does.
        request = dict(uri=url, method=method, headers=headers)
        if body is not None:
            headers['content-type'] = self.content_types[0]
            request['body'] = json.dumps(fields.encode_value(body))
        return request

    def raise_for_response(self, url, response, content, expected=HTTPStatus.OK):
        """Raises exceptions corresponding to responses other than the
        `expected` success, or success responses without JSON content.

        Override this method to customize the error handling behavior of the
        client for your Parse server.

        """
        if response.status != expected:
            code = error = None
            try:
                data = self.decode_content(content)
            except ValueError:
                data = None
            if isinstance(data, dict):
                code = data.get('code')
                error = data.get('error')

            if response.status == HTTPStatus.NOT_FOUND:
                err_cls = self.NotFound
            elif response.status == HTTPStatus.UNAUTHORIZED:
                err_cls = self.Unauthorized
            elif response.status == HTTPStatus.FORBIDDEN:
                err_cls = self.Forbidden
            elif response.status == HTTPStatus.BAD_REQUEST:
                err_cls = self.RequestError
            elif response.status >= HTTPStatus.INTERNAL_SERVER_ERROR:
                err_cls = self.ServerError
            else:
                err_cls = self.BadResponse

            message = ('Parse API failed with status code %d (%s) requesting %s'
                % (response.status, response.reason, url))
            if error is not None:
                message = '%s: %s (code %s)' % (message, error, code)
            log.debug('%s: %s', err_cls.__name__, message)
            raise err_cls(message, url=url, status=response.status,
                          reason=response.reason, code=code, error=error)

        if not content:
            return

        # check that the response body was json
        content_type = response.get('content-type', '').split(';', 1)[0].strip()
        if content_type not in self.content_types:
            raise self.BadResponse(
                'Bad response requesting %s: content-type %s is not an expected type'
                % (url, response.get('content-type')),
                url=url, status=response.status, reason=response.reason)

    def decode_content(self, content):
        """Decodes a JSON response body.

        Bodies that are not valid UTF-8 are decoded with the bad bytes
        replaced by the Unicode replacement character.

        """
        if not content:
            return {}
        try:
            return json.loads(content)
        except UnicodeDecodeError:
            return json.loads(content.decode('utf-8', 'replace'))

    def request(self, path, expected=HTTPStatus.OK, **kwargs):
        """Requests the given API path, returning the decoded response body.

        Keyword parameters are passed to `get_request()`. If the response
        does not have the `expected` status, raises an appropriate
        `ParseError` (as determined by `raise_for_response()`).

        """
        request = self.get_request(path, **kwargs)
        # Log only the path: login requests carry passwords in the query.
        log.debug('%s %s', request['method'], path)
        response, content = self.http.request(**request)

        self.raise_for_response(request['uri'], response, content, expected)
        return self.decode_content(content)

    def object_url(self, obj):
        return CLASS_OBJECT_URL % (quote_path(obj.get_class_name()),
                                   quote_path(obj.object_id))

    def check_not_user(self, cls, instead):
        if issubclass(cls, ParseUser):
            raise ValueError('Use %s() instead to work with users' % instead)

    def check_saved(self, obj):
        if obj is None or not obj.object_id:
            raise ValueError('An object id is required')

    def include_query(self, cls, include_references):
        if not include_references:
            return None
        names = [field.api_name for field in cls.pointer_fields()]
        if not names:
            return None
        return [('include', ','.join(names))]

    def query(self, path, cls, where=None, order=None, limit=100, skip=0):
        query = [('limit', limit), ('skip', skip), ('count', 1)]
        if where is not None:
            query.append(('where', encode_where(cls, where)))
        if order is not None:
            query.append(('order', encode_order(cls, order)))

        data = self.request(path, query=query)
        return ResultsOf(cls).from_dict(data)

    # objects

    def create_object(self, obj):
        """Saves a new object, returning it with its server-assigned
        `object_id`, `created_at` and `updated_at` set."""
        if obj is None:
            raise ValueError('An object to create is required')

        body = obj.to_body()
        path = CLASS_URL % quote_path(obj.get_class_name())
        data = self.request(path, method='POST', body=body,
                            expected=HTTPStatus.CREATED)

        # Parse returns no updatedAt for new objects.
        data.setdefault('updatedAt', data.get('createdAt'))
        obj.update_from_saved(body, data)
        return obj

    def update(self, obj):
        """Saves the changes to an existing object, returning it with its new
        `updated_at` time."""
        self.check_saved(obj)

        body = obj.to_body()
        data = self.request(self.object_url(obj), method='PUT', body=body)
        obj.update_from_saved(body, data)
        return obj

    def get_object(self, cls, object_id, include_references=False):
        """Fetches the `cls` object with the given object id.

        If `include_references` is true, the objects that the object's
        `Pointer` fields refer to are fetched in the same request.

        """
        if not object_id:
            raise ValueError('An object id is required')
        self.check_not_user(cls, 'get_user')

        path = CLASS_OBJECT_URL % (quote_path(cls.get_class_name()),
                                   quote_path(object_id))
        data = self.request(path, query=self.include_query(cls, include_references))
        return cls.from_dict(data)

    def get_objects(self, cls, where=None, order=None, limit=100, skip=0):
        """Queries the objects of class `cls`, returning a `QueryResult` of
        `cls` instances.

        Optional parameter `where` is a dictionary of field values or
        `Constraint` instances to match. Optional parameter `order` is the
        field name (or list of field names) to sort by, prefixed with ``-``
        for descending order. Parameters `limit` and `skip` page through the
        results.

        """
        self.check_not_user(cls, 'get_users')
        return self.query(CLASS_URL % quote_path(cls.get_class_name()), cls,
                          where=where, order=order, limit=limit, skip=skip)

    def delete_object(self, obj):
        """Deletes an object."""
        self.check_saved(obj)
        self.check_not_user(type(obj), 'delete_user')

        self.request(self.object_url(obj), method='DELETE')
        log.debug('Deleted %s %s', obj.get_class_name(), obj.object_id)

    # relations

    def change_relation(self, obj, relation_name, objects, op):
        self.check_saved(obj)

        field = obj.fields.get(relation_name)
        if field is not None:
            relation_name = field.api_name
        body = {
            relation_name: {
                '__op': op,
                'objects': [other.to_pointer() for other in objects],
            },
        }
        data = self.request(self.object_url(obj), method='PUT', body=body)
        obj.update_from_saved({}, data)

    def add_to_relation(self, obj, relation_name, objects):
        """Adds the given saved objects to the named relation of `obj`."""
        self.change_relation(obj, relation_name, objects, 'AddRelation')

    def remove_from_relation(self, obj, relation_name, objects):
        """Removes the given objects from the named relation of `obj`."""
        self.change_relation(obj, relation_name, objects, 'RemoveRelation')

    # users

    def check_credentials(self, user):
        if user is None or not user.username or not user.password:
            raise ValueError('A username and password are required')

    def check_session(self, user, session_token):
        if user is None or not user.object_id or not session_token:
            raise ValueError('An object id and session token are required')

    def sign_up(self, user):
        """Creates a new user account, returning a `UserSession` for the
        new user."""
        self.check_credentials(user)

        body = user.to_body()
        data = self.request(USER_URL, method='POST', body=body,
                            expected=HTTPStatus.CREATED)

        session_token = data.pop('sessionToken', None)
        # Parse returns no updatedAt for new objects.
        data.setdefault('updatedAt', data.get('createdAt'))
        user.update_from_saved(body, data)
        return UserSession(user=user, session_token=session_token)

    def log_in(self, user):
        """Logs in with the username and password of `user`, returning a
        `UserSession` with the user as stored on the server."""
        self.check_credentials(user)

        query = [('username', user.username), ('password', user.password)]
        data = self.request(LOGIN_URL, query=query)
        return UserSession(user=type(user).from_dict(data),
                           session_token=data.get('sessionToken'))

    def get_user(self, cls, object_id, session_token=None,
                 include_references=False):
        """Fetches the user with the given object id as a `cls` instance.

        Optional parameter `session_token` authenticates the request as the
        user, so that fields only visible to the user are returned.

        """
        if not object_id:
            raise ValueError('An object id is required')
        if not issubclass(cls, ParseUser):
            raise ValueError('Use get_object() instead to work with %s objects'
                % cls.__name__)

        path = USER_OBJECT_URL % quote_path(object_id)
        data = self.request(path, query=self.include_query(cls, include_references),
                            session_token=session_token)
        return cls.from_dict(data)

    def get_users(self, cls=ParseUser, where=None, order=None, limit=100, skip=0):
        """Queries users, returning a `QueryResult` of `cls` instances."""
        if not issubclass(cls, ParseUser):
            raise ValueError('Use get_objects() instead to work with %s objects'
                % cls.__name__)
        return self.query(USER_URL, cls, where=where, order=order,
                          limit=limit, skip=skip)

    def update_user(self, user, session_token):
        """Saves the changes to a user, returning it with its new
        `updated_at` time."""
        self.check_session(user, session_token)

        body = user.to_body()
        path = USER_OBJECT_URL % quote_path(user.object_id)
        data = self.request(path, method='PUT', body=body,
                            session_token=session_token)
        user.update_from_saved(body, data)
        return user

    def delete_user(self, user, session_token):
        """Deletes a user account."""
        self.check_session(user, session_token)

        path = USER_OBJECT_URL % quote_path(user.object_id)
        self.request(path, method='DELETE', session_token=session_token)
        log.debug('Deleted user %s', user.object_id)

    def request_password_reset(self, email):
        """Asks Parse to email a password reset link to the user with the
        given email address."""
        if not email:
            raise ValueError('An email address is required')
        self.request(PASSWORD_RESET_URL, method='POST', body={'email': email})

    # cloud functions

    def cloud_function(self, name, data=None):
        """Calls the named cloud function with the parameters in `data`,
        returning the function's result."""
        if not name:
            raise ValueError('A function name is required')
        if data is None:
            # The API requires a body, even an empty one.
            data = {}
        response = self.request(FUNCTION_URL % quote_path(name), method='POST',
                                body=data)
        return fields.decode_value(response.get('result'))

    # analytics

    def track_event(self, name, dimensions=None, at=None):
        """Records an analytics event.

        Optional parameter `dimensions` is a dictionary of strings to segment
        the event by. Optional parameter `at` is the `datetime` when the event
        happened, if not now.

        """
        if not name:
            raise ValueError('An event name is required')
        body = {}
        if at is not None:
            body['at'] = at
        if dimensions:
            body['dimensions'] = dimensions
        self.request(EVENT_URL % quote_path(name), method='POST', body=body)

    def mark_app_opened(self, at=None):
        """Records that the application was opened, now or at the given
        `datetime`."""
        self.track_event(APP_OPENED_EVENT, at=at)
