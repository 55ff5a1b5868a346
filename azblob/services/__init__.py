"""HTTP services exposed by azblob-plugin."""
