# netlab

A set of small socket programs and helpers for exploring TCP and UDP
networking on POSIX systems: byte-order and address conversion, files and
descriptors, workers and pipes, echo servers, file transfer, broadcast and
multicast, selector-based servers and a threaded chat room.

Only the standard library is used.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Commands

| Command | Arguments | What it does |
| --- | --- | --- |
| `netlab-hello` | `[name]` | Prints `Hello, Socket`, or `Hello, <name>` when a name is given |
| `netlab-file-server` | `<port>` | Sends the `netlab/filetransfer.py` file to the first client, shuts down its write side and prints the client's reply |
| `netlab-file-client` | `<ip> <port>` | Receives a file into `receive.dat` and answers `Thank you` |
| `netlab-echo-server` | `<port>` | Echoes everything the first client sends until it disconnects |
| `netlab-echo-client` | `<ip> <port>` | Sends lines typed on standard input and prints their echo; `q` or `Q` quits |
| `netlab-forking-echo` | `<port>` | Echo server with a thread per client; the first 10 reads are logged to `echomsg.txt` through a pipe |
| `netlab-broadcast` | `<port>` | Broadcasts each non-blank line typed on standard input to `255.255.255.255` |
| `netlab-broadcast-recv` | `<port>` | Prints every datagram received on the port with its sender |
| `netlab-multicast` | `<group-ip> <port> <message>` | Sends one message to a multicast group with a TTL of 64 |
| `netlab-multicast-recv` | `<group-ip> <port>` | Joins a multicast group and prints its messages |
| `netlab-relay` | `<port>` | Echoes each message and relays it to every other connected client |
| `netlab-poll-server` | `<port>` | Echo server watching at most 100 descriptors, the listening socket included |
| `netlab-chat-select` | `<ip> <port>` | Chat client watching standard input and the socket together; `q` or `Q` quits |
| `netlab-chat-server` | `<port>` | Threaded chat server that sends every message to all clients, the sender included |
| `netlab-chat-client` | `<ip> <port> <name>` | Chat client that prefixes each message with `[name]`; `q` or `Q` quits |

The servers run until interrupted. A quick session on one machine:

```
netlab-chat-server 9000
netlab-chat-client 127.0.0.1 9000 alice
netlab-chat-client 127.0.0.1 9000 bob
```

## Library

The modules can also be used directly:

- `netlab.addressing`: `htons`, `htonl`, `ntohs`, `ntohl`, `first_byte`,
  `inet_addr`, `inet_aton`, `inet_ntoa`, `make_sockaddr`, `lookup_host`,
  `lookup_address`, `socket_buffer_sizes`, `set_receive_buffer`, and the
  `SockAddrIn` and `HostInfo` records. `inet_aton` accepts one to four
  parts in decimal, octal or hexadecimal and raises `ValueError` on
  anything else.
- `netlab.fileio`: `descriptor_numbers`, `open_created` (a context manager
  yielding a descriptor), `write_message` (writes the text and a NUL byte),
  `read_message`.
- `netlab.processes`: `fork_counters`, `pipe_message`, `pipe_dialogue`,
  `collect_exit_statuses`, `poll_child_exit`, `repeating_alarm`. The
  workers are threads talking over real OS pipes; `repeating_alarm`
  installs `SIGALRM` and `SIGINT` handlers, so it must run in the main
  thread on a POSIX system.
- `netlab.filetransfer`: `serve_file`, `receive_file`.
- `netlab.echo`: `serve_greeting`, `fetch_greeting`, `EchoServer`
  (`serve_one`, `close`, usable as a context manager), `echo_session`.
- `netlab.forking_echo`: `ForkingEchoServer` (`serve_forever`, `close`).
- `netlab.datagram`: `send_broadcast`, `receive_datagrams`,
  `send_multicast`, `receive_multicast`. The receivers bind at once and
  return iterators of what arrives.
- `netlab.multiplex`: `wait_for_input`, `RelayServer` and
  `PollEchoServer` (each with `step(timeout)` and `close`), `chat_loop`.
- `netlab.chat`: `format_message`, `ChatServer` (`serve_forever`,
  `broadcast`, `close`), `ChatClient` (`send`, `messages`, `close`).

Servers opened on port `0` pick a free port, available as their `port`
attribute.

```python
from netlab.addressing import htonl, inet_ntoa

print(hex(htonl(0x12345678)))
print(inet_ntoa(0x0100A8C0))
```

On a little-endian machine this prints `0x78563412` and `192.168.0.1`.

## What it does not do

There is no HTTP or web server here: the servers speak raw bytes over TCP
or UDP only. Nothing is encrypted or authenticated, and the chat programs
keep no history or user accounts.