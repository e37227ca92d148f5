[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netlab"
version = "0.1.0"
description = "Small TCP and UDP socket programs: echo, file transfer, broadcast, multicast, multiplexed and threaded chat servers"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "sockets",
    "tcp",
    "udp",
    "echo",
    "multicast",
    "broadcast",
    "select",
    "poll",
    "chat",
]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Networking",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netlab-hello = "netlab.fileio:main"
netlab-file-server = "netlab.filetransfer:main_server"
netlab-file-client = "netlab.filetransfer:main_client"
netlab-echo-server = "netlab.echo:main_server"
netlab-echo-client = "netlab.echo:main_client"
netlab-forking-echo = "netlab.forking_echo:main"
netlab-broadcast = "netlab.datagram:main_broadcast"
netlab-broadcast-recv = "netlab.datagram:main_broadcast_receiver"
netlab-multicast = "netlab.datagram:main_multicast"
netlab-multicast-recv = "netlab.datagram:main_multicast_receiver"
netlab-relay = "netlab.multiplex:main_relay"
netlab-poll-server = "netlab.multiplex:main_poll"
netlab-chat-select = "netlab.multiplex:main_chat"
netlab-chat-server = "netlab.chat:main_server"
netlab-chat-client = "netlab.chat:main_client"

[tool.hatch.build.targets.wheel]
packages = ["netlab"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
