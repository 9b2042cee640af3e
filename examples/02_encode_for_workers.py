import json
from pathlib import Path

from trafficmix import codec, dump_document, load_config


HERE = Path(__file__).parent


def main():
    mix = load_config(HERE / "tcp_syn.json")
    data = codec.encode(mix)
    print(f"Encoded {len(mix)} entries in {len(data)} bytes")

    # Workers decode their own copy; random sequence seeds are drawn again
    received = codec.decode(data)
    print(json.dumps(dump_document(received), indent=2))
    assert len(received) == len(mix)


if __name__ == "__main__":
    main()
