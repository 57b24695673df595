"""HTTP gateway in front of the pansou search engine and the Douban catalog."""
