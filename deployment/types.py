import click
from eth_utils import decode_hex, is_address, to_checksum_address


class ChecksumAddress(click.ParamType):
    name = "checksum_address"

    def convert(self, value, param, ctx):
        if not is_address(value):
            self.fail(f"{value} is not a valid address", param, ctx)
        return to_checksum_address(value)


class Bytes32(click.ParamType):
    name = "bytes32"

    def convert(self, value, param, ctx):
        try:
            raw = decode_hex(value)
        except ValueError:
            self.fail(f"{value} is not hex encoded", param, ctx)
        if len(raw) != 32:
            self.fail(f"{value} is {len(raw)} bytes long, expected 32", param, ctx)
        return value
