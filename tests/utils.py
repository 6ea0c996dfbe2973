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

import logging

import httplib2
import mock
import simplejson as json


APP_ID = 'appid'
REST_API_KEY = 'restapikey'
BASE_URL = 'https://api.parse.com/1/'

HEADERS = {
    'accept': 'application/json',
    'X-Parse-Application-Id': APP_ID,
    'X-Parse-REST-API-Key': REST_API_KEY,
}

BODY_HEADERS = dict(HEADERS)
BODY_HEADERS['content-type'] = 'application/json'


def mock_http(resp_or_content):
    mock_obj = mock.NonCallableMock(spec_set=httplib2.Http)

    def make_response(response):
        default_response = {
            'status':       200,
            'content-type': 'application/json; charset=utf-8',
        }

        if isinstance(response, dict):
            response = dict(response)
            content = response.pop('content', '')

            status = response.get('status', 200)
            if 200 <= status < 300:
                response_info = dict(default_response)
                response_info.update(response)
            else:
                # Homg all bets are off!! Use specified headers only.
                response_info = response
        else:
            response_info = dict(default_response)
            content = response

        resp = httplib2.Response(response_info)
        # httplib2 only reads the reason from real HTTP responses.
        resp.reason = response_info.get('reason', 'Ok')
        return resp, content

    mock_obj.request.return_value = make_response(resp_or_content)
    return mock_obj


def request_made(http):
    """Returns the keyword arguments of the one request made through the
    mock `http`, with its JSON body decoded."""
    if http.request.call_count != 1:
        raise AssertionError('Expected 1 request but %d were made'
            % http.request.call_count)
    args, request = http.request.call_args
    if args:
        raise AssertionError('Request made with positional arguments %r' % (args,))
    request = dict(request)
    if 'body' in request:
        request['body'] = json.loads(request['body'])
    return request


def log():
    import sys
    logging.basicConfig(level=logging.DEBUG, stream=sys.stderr, format="%(asctime)s %(levelname)s %(message)s")
