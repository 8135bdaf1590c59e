EXPORT_NS_PREFIX = "http://www.mediawiki.org/xml/export-"

FORMAT = "format"
MODEL = "model"
NS = "ns"
PAGE = "page"
TEXT = "text"
TITLE = "title"
