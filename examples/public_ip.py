#!/usr/bin/env python
#
# Ask a gateway with a known control URL for the public IP address, using
# the asyncio API.
#

import asyncio
import sys

import aiohttp

import igdclient


async def main(control_url):
    async with aiohttp.ClientSession() as session:
        device = igdclient.AsyncDevice(
            control_url.split("//", 1)[1].split("/", 1)[0], control_url, session=session
        )
        print(await device.public_ip())


if __name__ == "__main__":
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else "http://192.168.1.1:1780/ctl/IPConn"))
