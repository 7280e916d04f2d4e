import pytest
import zmq

from route_sync_agent.transport import ZmqPublisher


class FakeSocket:
    def __init__(self, bind_error=None):
        self.bind_error = bind_error
        self.options = {}
        self.bound = []
        self.sent = []
        self.closed = False

    def setsockopt(self, option, value):
        self.options[option] = value

    def bind(self, endpoint):
        if self.bind_error is not None:
            raise self.bind_error
        self.bound.append(endpoint)

    def send_multipart(self, frames):
        self.sent.append(frames)

    def close(self):
        self.closed = True


class FakeContext:
    def __init__(self, sock):
        self.sock = sock
        self.kinds = []

    def socket(self, kind):
        self.kinds.append(kind)
        return self.sock


def test_publisher_sends_subject_and_payload():
    sock = FakeSocket()
    context = FakeContext(sock)
    publisher = ZmqPublisher("tcp://127.0.0.1:4222", context=context)

    publisher.publish("router.register", b'{"host": "10.0.0.1"}')
    publisher.close()

    assert context.kinds == [zmq.PUB]
    assert sock.options == {zmq.LINGER: 0}
    assert sock.bound == ["tcp://127.0.0.1:4222"]
    assert sock.sent == [[b"router.register", b'{"host": "10.0.0.1"}']]
    assert sock.closed


def test_publisher_reports_bind_failures():
    sock = FakeSocket(bind_error=zmq.ZMQError(zmq.EADDRINUSE))

    with pytest.raises(ValueError, match="cannot bind route publisher"):
        ZmqPublisher("tcp://127.0.0.1:4222", context=FakeContext(sock))

    assert sock.closed
