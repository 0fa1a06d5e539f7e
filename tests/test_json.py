import json
import tcpbus


def test_json_encode_and_decode():
    encode_and_decode(json.dumps, json.loads, dump_is_bytes=False)


def test_tcpbus_encode_and_decode():
    encode_and_decode(tcpbus.json.dumps, tcpbus.json.loads)


def test_dumps_text():
    encoded = tcpbus.json.dumps_text({'msg': 'hello'})
    assert isinstance(encoded, str)
    assert json.loads(encoded) == {'msg': 'hello'}


def encode_and_decode(dumps, loads, dump_is_bytes=True):

    input_dictionary = dict()
    input_dictionary['list'] = [1, 2, 3, 'a', 'b', None, 'c', 'z']
    input_dictionary['dict'] = {'one': 1, 'two': 2}
    input_dictionary['none'] = None
    input_dictionary['true'] = True
    input_dictionary['false'] = False
    input_dictionary['text'] = 'Order #12345 created: café'

    encoded = dumps(input_dictionary)

    if dump_is_bytes:
        assert isinstance(encoded, bytes)
    else:
        assert isinstance(encoded, str)

    # It won't do to compare the encoded JSON against a pre-set notion of
    # what the encoded output should look like, as there is variance in
    # the handling of whitespace between the different modules.

    decoded = loads(encoded)
    assert isinstance(decoded, dict)
    assert decoded == input_dictionary


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
