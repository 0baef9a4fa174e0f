"""Terminal user interface: events, borders, colours, key decoding and an inline ANSI renderer."""