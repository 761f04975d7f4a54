class SuggestionsUnavailable(RuntimeError):
	"""The exercise generator could not be used: no credential, failed call, or unparseable output.

	A batch that merely came back smaller than requested is not an error.
	"""
